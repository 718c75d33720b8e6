from dotenv import load_dotenv

load_dotenv()

from contextlib import asynccontextmanager
import logging
import sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from aura_api.core.config import Settings, get_settings
from aura_api.core.errors import ServiceError
from aura_api.core.identity import SupabaseIdentity
from aura_api.core.lava import LavaGateway
from aura_api.core.mailer import Mailer
from aura_api.core.rate_limiter import RateLimiter
from aura_api.domain.tariffs import TariffCatalog
from aura_api.repositories.sql_repository import SQLRepository
from aura_api.routers import auth as auth_router
from aura_api.routers import content as content_router
from aura_api.routers import hooks as hooks_router
from aura_api.routers import payments as payments_router
from aura_api.routers import uploads as uploads_router
from aura_api.services.auth_service import AuthService
from aura_api.services.billing_service import BillingService
from aura_api.services.content_service import ContentService
from aura_api.services.reconciler import WebhookReconciler
from aura_api.services.upload_service import PUBLIC_PREFIX, UploadStore

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
            message = f"{field}: {first.get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("%s %s storage failure", request.method, request.url.path, exc_info=exc)
        return _error(500, "Storage error")


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[SQLRepository] = None,
    identity: Optional[SupabaseIdentity] = None,
    gateway: Optional[LavaGateway] = None,
    mailer: Optional[Mailer] = None,
    tariffs: Optional[TariffCatalog] = None,
) -> FastAPI:
    """Build the application and the long-lived clients it injects into every handler."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    repository = repository or SQLRepository()
    identity = identity or SupabaseIdentity.from_settings(settings)
    gateway = gateway or LavaGateway.from_settings(settings)
    mailer = mailer or Mailer(settings)
    tariffs = tariffs or TariffCatalog.from_config(settings.tariff_catalog)
    upload_store = UploadStore.from_settings(settings)
    uploads_dir = upload_store.ensure_directory()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        identity.close()
        gateway.close()

    app = FastAPI(title="Neuro Aura API", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter()
    app.state.tariffs = tariffs
    app.state.upload_store = upload_store
    app.state.auth_service = AuthService(settings=settings, repository=repository, identity=identity, mailer=mailer)
    app.state.reconciler = WebhookReconciler(
        settings=settings,
        repository=repository,
        identity=identity,
        mailer=mailer,
        tariffs=tariffs,
    )
    app.state.billing_service = BillingService(settings=settings, repository=repository, gateway=gateway, tariffs=tariffs)
    app.state.content_service = ContentService(repository=repository, identity=identity)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    _register_error_handlers(app)

    @app.get("/")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router)
    app.include_router(payments_router.router)
    app.include_router(hooks_router.router)
    app.include_router(content_router.router)
    app.include_router(uploads_router.router)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(uploads_dir)), name="uploads")

    logger.info("Neuro Aura API configured (%s, %d tariffs)", settings.app_env, len(tariffs))
    return app
