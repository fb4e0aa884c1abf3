"""
Health Monitor API - FastAPI Application
========================================
Patient vital-sign monitoring: accounts, records, device ingestion and
AI-generated health reports.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from healthmonitor.ai import LLMWrapper
from healthmonitor.auth import JWTHandler, PasswordHandler, Role
from healthmonitor.database import BloodGroup, NewUser, build_store

from app.api.v1.routes import admin, ai_analysis, auth, ecg_data, patients, users, vitals
from app.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.models.schemas import HealthResponse, ReadyResponse

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _log_uncaught(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def seed_admin(app: FastAPI) -> None:
    """Create the default admin account unless one with ADMIN_EMAIL exists."""
    settings: Settings = app.state.settings
    store = app.state.store
    if store.get_user_by_email(settings.ADMIN_EMAIL) is not None:
        return

    store.create_user(NewUser(
        email=settings.ADMIN_EMAIL,
        phone="0000000000",
        password_hash=app.state.password_handler.hash_password(settings.ADMIN_PASSWORD),
        blood_group=BloodGroup.O_POS.value,
        gender="Other",
        role=Role.ADMIN,
    ))
    logger.info(f"Seeded admin account {settings.ADMIN_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")

    app.state.store.initialize()
    if settings.SEED_ADMIN:
        seed_admin(app)
    yield
    # Shutdown
    app.state.store.close()
    logger.info(f"Shutting down {settings.APP_NAME}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Raises:
        ConfigurationError: the settings are unsafe for the environment
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    settings.validate_for_startup()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Patient vital-sign monitoring API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.store = build_store(settings.STORAGE_BACKEND, settings.DATABASE_URL)
    app.state.password_handler = PasswordHandler(rounds=settings.BCRYPT_ROUNDS)
    app.state.jwt_handler = JWTHandler(
        secret_key=settings.SESSION_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expiry=timedelta(days=settings.TOKEN_EXPIRE_DAYS),
    )
    app.state.report_generator = LLMWrapper(
        api_key=settings.GROQ_API_KEY,
        model=settings.LLM_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms")
        if settings.is_production:
            response.headers.update(SECURITY_HEADERS)
        return response

    register_exception_handlers(app, debug=settings.is_development)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(patients.router, prefix="/api/patients", tags=["Patient Records"])
    app.include_router(ecg_data.router, prefix="/api/ecg-data", tags=["ECG Data"])
    app.include_router(vitals.router, prefix="/api/vitals", tags=["Device Vitals"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
    app.include_router(ai_analysis.router, prefix="/api/ai-analysis", tags=["AI Analysis"])

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Liveness probe."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(),
            uptime=time.monotonic() - app.state.started_at,
            environment=settings.ENVIRONMENT,
        )

    @app.get("/ready", response_model=ReadyResponse, tags=["Health"])
    def readiness_check():
        """Readiness probe. 503 while the store is unreachable."""
        healthy = app.state.store.health_check()
        body = ReadyResponse(
            status="ready" if healthy else "not_ready",
            timestamp=datetime.now(),
            storage={"backend": settings.STORAGE_BACKEND, "healthy": healthy},
        )
        if not healthy:
            return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
        return body

    return app


sys.excepthook = _log_uncaught

app = create_app()
