"""create_catalog_tables

Revision ID: 001_create_catalog
Revises:
Create Date: 2026-03-01

Creates users, categories and products. Product images and ratings are
embedded JSONB arrays; products.version backs the optimistic save check.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_create_catalog'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
    )
    op.create_index('idx_users_email', 'users', ['email'])
    op.create_index('idx_users_status', 'users', ['status'])

    op.create_table(
        'categories',
        sa.Column('category_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('slug', sa.String(120), nullable=False, unique=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('image_asset_id', sa.String(255), nullable=True),
        sa.Column('parent_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('categories.category_id'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
    )

    op.create_table(
        'products',
        sa.Column('product_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('sku', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('categories.category_id'), nullable=True),
        sa.Column('price', sa.Float, nullable=False),
        sa.Column('discount', sa.Float, nullable=False, server_default='0'),
        sa.Column('final_price', sa.Float, nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('features', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('images', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('ratings', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('average_rating', sa.Float, nullable=False, server_default='0'),
        sa.Column('version', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='chk_product_price_non_negative'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='chk_product_discount_range'),
        sa.CheckConstraint('quantity >= 0', name='chk_product_quantity_non_negative'),
    )
    op.create_index('idx_products_category', 'products', ['category_id'])
    op.create_index('idx_products_final_price', 'products', ['final_price'])
    op.create_index('idx_products_status', 'products', ['status'])


def downgrade() -> None:
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_index('idx_users_status', table_name='users')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
