from __future__ import annotations

from fastapi import APIRouter, Depends

from aura_api.routers.deps import get_auth_service, rate_limit
from aura_api.schemas.auth import (
    ConfirmCodeRequest,
    ResetPasswordActionRequest,
    ResetPasswordRequest,
    SendCodeRequest,
)
from aura_api.services.auth_service import AuthService

router = APIRouter(tags=["auth"])


@router.post("/send-email", dependencies=[Depends(rate_limit("auth:send-email", limit=5, window_seconds=300))])
def send_email(body: SendCodeRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.send_confirmation_code(body.to)
    return {"success": True, "message": "Email sent!"}


@router.post("/confirm-email", dependencies=[Depends(rate_limit("auth:confirm-email", limit=10, window_seconds=300))])
def confirm_email(body: ConfirmCodeRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.confirm_email(body.to, body.code)
    return {"success": True, "message": "Email confirmed!"}


@router.post("/reset-password", dependencies=[Depends(rate_limit("auth:reset", limit=5, window_seconds=300))])
def reset_password(body: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.issue_password_reset(body.to)
    return {"success": True, "message": "Email sent!"}


@router.post("/reset-password-action", dependencies=[Depends(rate_limit("auth:reset-action", limit=10, window_seconds=300))])
def reset_password_action(body: ResetPasswordActionRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.reset_password(body.to, body.token, body.password, body.password_repeat)
    return {"success": True, "message": "Password changed successfully"}
