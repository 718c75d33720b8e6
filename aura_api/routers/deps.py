"""FastAPI dependencies that hand the app-scoped services to the endpoints."""
from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from aura_api.core.rate_limiter import rate_limit_ip
from aura_api.core.security import WEBHOOK_KEY_HEADER, verify_webhook_key
from aura_api.services.auth_service import AuthService
from aura_api.services.billing_service import BillingService
from aura_api.services.content_service import ContentService
from aura_api.services.reconciler import WebhookReconciler
from aura_api.services.upload_service import UploadStore


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_billing_service(request: Request) -> BillingService:
    return request.app.state.billing_service


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service


def get_reconciler(request: Request) -> WebhookReconciler:
    return request.app.state.reconciler


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store


def require_webhook_key(request: Request, x_api_key: Optional[str] = Header(None, alias=WEBHOOK_KEY_HEADER)) -> None:
    verify_webhook_key(x_api_key, request.app.state.settings.webhook_secret)


def rate_limit(scope: str, *, limit: int, window_seconds: int):
    def _dependency(request: Request) -> None:
        rate_limit_ip(request, scope, limit=limit, window_seconds=window_seconds)

    return _dependency
