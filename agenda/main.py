from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agenda.config import get_settings
from agenda.dependencies.services import get_store_cached

# Import routers directly from submodules
from agenda.health import router as health_router
from agenda.routes.admin import router as admin_router
from agenda.routes.public import router as public_router
from agenda.store_view import router as store_view_router


def configure_logging(level: str = "INFO") -> None:
    """Ensure application logs use the configured level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(log_level)


settings = get_settings()

# Configure logging as soon as the module is loaded
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    # --- Startup Logic ---
    settings = get_settings()
    logger.info("Application settings on startup: %s", settings.model_dump())

    store = get_store_cached()
    providers = await store.providers.list(active_only=True)
    logger.info("Application startup complete with %d active providers.", len(providers))

    try:
        yield  # The application is now running
    finally:
        # --- Shutdown Logic ---
        swept = store.tokens.sweep()
        logger.info("Dropped %d expired confirmation tokens.", swept)
        logger.info("Application shutdown complete.")


# --- Application Setup ---

app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---

app.include_router(public_router)
app.include_router(admin_router, prefix="/admin")
app.include_router(store_view_router)
app.include_router(health_router)
