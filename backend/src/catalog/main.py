import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.errors import register_exception_handlers
from catalog.api.v1 import auth, categories, products, users
from catalog.core.config import settings
from catalog.core.database import engine
from catalog.core.redis import close_redis
from catalog.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from catalog.middleware.rate_limit import RateLimitMiddleware
from catalog.services.asset_store import CloudinaryAssetStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create shared clients on startup and release them on shutdown."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting application...")

    if not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("CLOUDINARY_CLOUD_NAME is not set; image operations will fail")
    app.state.asset_store = CloudinaryAssetStore(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        folder=settings.CLOUDINARY_FOLDER,
        timeout=settings.ASSET_STORE_TIMEOUT,
    )

    yield

    logger.info("Shutting down...")
    await app.state.asset_store.aclose()
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Product Catalog",
    version="1.0.0",
    description="Products, categories, users, images and ratings",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Prometheus Metrics Middleware (added first, so it wraps the least)
app.add_middleware(PrometheusMiddleware)

app.add_middleware(
    RateLimitMiddleware,
    user_limit=settings.RATE_LIMIT_USER,
    ip_limit=settings.RATE_LIMIT_IP,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(products.router, prefix="/api/v1/products", tags=["products"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


app.add_route("/metrics", metrics_endpoint)
