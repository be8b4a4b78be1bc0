"""User service for registration, authentication and profile updates."""

from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import DuplicateError, ValidationFailedError
from catalog.core.security import get_password_hash, verify_password
from catalog.models.user import User
from catalog.schemas.user import UserProfileUpdate, UserRegister

PROFILE_FIELDS = ("name", "email")


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.user_id == user_id))
        return result.scalar_one_or_none()

    async def create_user(self, user_data: UserRegister, role: str = "user") -> User:
        """Create a new user.

        Args:
            user_data: User registration data
            role: "user" or "admin"

        Returns:
            Created user

        Raises:
            DuplicateError: If email already exists
        """
        existing = await self.get_by_email(user_data.email)
        if existing:
            raise DuplicateError("Email already registered")

        user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            name=user_data.name,
            role=role,
            status="active",
        )

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateError("Email already registered")

    async def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate user by email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        if user.status != "active":
            return None
        return user

    async def update_profile(self, user: User, updates: dict) -> User:
        """Update the user's own profile; only name and email may change.

        Raises:
            ValidationFailedError: Any other field was supplied
            DuplicateError: The new email belongs to someone else
        """
        if not all(field in PROFILE_FIELDS for field in updates):
            raise ValidationFailedError("Invalid updates")

        try:
            updates = UserProfileUpdate.model_validate(updates).model_dump(
                exclude_unset=True
            )
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e

        new_email = updates.get("email")
        if new_email and new_email != user.email:
            if await self.get_by_email(new_email):
                raise DuplicateError("Email already registered")

        for field, value in updates.items():
            setattr(user, field, value)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateError("Email already registered")
        await self.db.refresh(user)
        return user
