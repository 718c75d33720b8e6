"""
Error taxonomy shared by services and routers.

Services raise these; the application turns them into the JSON envelope
``{"success": false, "error": <message>}`` with the matching status code.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures reported back to the HTTP caller."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 400


class TariffNotFoundError(NotFoundError):
    def __init__(self, key: str):
        super().__init__("Tariff not found")
        self.key = key


class AuthError(ServiceError):
    status_code = 401


class ForbiddenError(AuthError):
    status_code = 403


class UpstreamError(ServiceError):
    """A third-party provider (store, identity, mail, gateway) failed."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, provider: str = "", detail: object = None):
        super().__init__(message, status_code=status_code)
        self.provider = provider
        self.detail = detail
