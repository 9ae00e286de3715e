import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from printshop.core.config import Settings, settings as default_settings
from printshop.core.database import Base, build_engine, build_session_factory
from printshop.core.exceptions import InternalError
from printshop.core.scheduler import start_scheduler, stop_scheduler
from printshop.core.security import PasswordHasher, SessionIssuer
from printshop.storage.local_storage import LocalStorage
from printshop.api.routes import auth, contact, dashboard, materials, orders, profile

# Imported for their table definitions
from printshop.models import message, order, user  # noqa: F401

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API.

    Everything configurable is built here from app_settings, once, and kept
    on app.state: the database engine and its session factory, the password
    hasher, the session issuer and upload storage. Two apps built from
    different settings share nothing.
    """
    app_settings = app_settings or default_settings

    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = build_engine(app_settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    storage = LocalStorage(app_settings.UPLOAD_DIR, app_settings.MAX_FILE_SIZE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: create missing tables, start the orphaned upload sweep
        Shutdown: stop the sweep, release pooled connections
        """
        # In production, use migrations (Alembic) instead of create_all
        Base.metadata.create_all(bind=app.state.engine)
        if app_settings.ENABLE_CLEANUP_SCHEDULER:
            start_scheduler(
                app.state.session_factory,
                app.state.storage,
                interval_hours=app_settings.CLEANUP_INTERVAL_HOURS,
                grace_minutes=app_settings.ORPHAN_GRACE_MINUTES,
            )
        yield
        stop_scheduler()
        app.state.engine.dispose()

    app = FastAPI(
        title="Print Shop API",
        description="Order management for a 3D printing shop",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.password_hasher = PasswordHasher(rounds=app_settings.BCRYPT_ROUNDS)
    app.state.storage = storage
    app.state.session_issuer = SessionIssuer(
        app_settings.SECRET_KEY,
        algorithm=app_settings.ALGORITHM,
        ttl=timedelta(hours=app_settings.ACCESS_TOKEN_EXPIRE_HOURS),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _format_validation_errors(exc)}
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_handler(request: Request, exc: SQLAlchemyError):
        # Store failures end the request; nothing is retried
        logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
        error = InternalError()
        return JSONResponse(
            status_code=error.status_code,
            content={"detail": error.detail}
        )

    for module in (auth, profile, orders, dashboard, contact, materials):
        app.include_router(module.router, prefix=app_settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": "Print Shop API", "version": "1.0.0"}

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
