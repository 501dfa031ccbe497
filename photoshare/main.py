"""
Main FastAPI application entry point.
Configures the application, middleware, and routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from photoshare.api.routes import admin, auth, health
from photoshare.core.config import settings
from photoshare.core.exceptions import AppError, register_exception_handlers
from photoshare.core.logging import get_logger, setup_logging
from photoshare.db.session import engine, init_db
from photoshare.models.user import UserRole
from photoshare.schemas.user import UserCreate
from photoshare.services.user_service import UserService

setup_logging()
logger = get_logger(__name__)


def bootstrap_admin() -> None:
    """Create the first administrator unless it already exists."""
    with Session(engine) as session:
        if UserService.get_by_email(session, settings.FIRST_ADMIN_EMAIL):
            return

        logger.info("Creating first administrator...")
        try:
            admin_in = UserCreate(
                name=settings.FIRST_ADMIN_NAME,
                email=settings.FIRST_ADMIN_EMAIL,
                password=settings.FIRST_ADMIN_PASSWORD,
            )
            UserService.create(session, admin_in, role=UserRole.ADMIN)
        except PydanticValidationError as e:
            logger.error(f"Invalid first administrator settings: {e}")
            return
        except AppError as e:
            logger.error(f"Failed to create first administrator: {e.message}")
            return
        logger.info(f"Administrator created: {settings.FIRST_ADMIN_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    init_db()

    if not settings.DISABLE_BOOTSTRAP_USERS:
        bootstrap_admin()
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "content-type", "accept"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(admin.router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
