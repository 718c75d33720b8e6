"""
Client for the Supabase Auth (GoTrue) admin API.

Only the calls the backend needs: create a confirmed user, find a user by
email, change a password and introspect an access token.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import AuthError, UpstreamError

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 200


class IdentityProviderError(UpstreamError):
    def __init__(self, message: str, *, upstream_status: int | None = None, detail: object = None):
        super().__init__(message, provider="supabase", detail=detail)
        self.upstream_status = upstream_status


@dataclass
class IdentityUser:
    id: str
    email: str

    @classmethod
    def from_payload(cls, payload: dict) -> "IdentityUser":
        # admin endpoints answer with the user object, some versions wrap it in {"user": {...}}
        data = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        return cls(id=str(data.get("id") or ""), email=str(data.get("email") or ""))


class SupabaseIdentity:
    """Thin wrapper over the GoTrue REST endpoints using the service role key."""

    def __init__(self, base_url: str, service_key: str, *, timeout: float = 15.0, client: httpx.Client | None = None):
        self.base_url = (base_url or "").rstrip("/")
        self.service_key = service_key
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.Client | None = None) -> "SupabaseIdentity":
        return cls(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.http_timeout_seconds,
            client=client,
        )

    def close(self) -> None:
        self._client.close()

    # -------------------------------------- transport --------------------------------------
    def _headers(self, bearer: Optional[str] = None) -> dict:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {bearer or self.service_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        bearer: Optional[str] = None,
    ) -> httpx.Response:
        if not (self.base_url and self.service_key):
            raise IdentityProviderError("Identity provider is not configured")
        url = f"{self.base_url}{path}"
        try:
            return self._client.request(method, url, json=json, params=params, headers=self._headers(bearer))
        except httpx.TimeoutException as exc:
            logger.error("[identity] %s %s timed out: %s", method, path, exc)
            raise IdentityProviderError("Identity provider timeout") from exc
        except httpx.RequestError as exc:
            logger.error("[identity] %s %s failed: %s", method, path, exc)
            raise IdentityProviderError("Identity provider unavailable") from exc

    def _json(self, response: httpx.Response, action: str) -> dict:
        if response.status_code >= 400:
            logger.error("[identity] %s failed: %s %s", action, response.status_code, response.text[:500])
            raise IdentityProviderError(
                f"Identity provider error while trying to {action}",
                upstream_status=response.status_code,
                detail=response.text,
            )
        if not response.content:
            return {}
        return response.json()

    # -------------------------------------- admin calls --------------------------------------
    def create_user(self, email: str, password: str) -> IdentityUser:
        """Create a user whose email is already confirmed."""
        response = self._request(
            "POST",
            "/auth/v1/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
        )
        user = IdentityUser.from_payload(self._json(response, "create user"))
        logger.info("[identity] Created user %s for %s", user.id, email)
        return user

    def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        page = 1
        while True:
            response = self._request(
                "GET",
                "/auth/v1/admin/users",
                params={"page": page, "per_page": USERS_PAGE_SIZE},
            )
            data = self._json(response, "list users")
            users = data.get("users") or []
            for item in users:
                if item.get("email") == email:
                    return IdentityUser.from_payload(item)
            if len(users) < USERS_PAGE_SIZE:
                return None
            page += 1

    def update_user_password(self, user_id: str, password: str) -> None:
        response = self._request("PUT", f"/auth/v1/admin/users/{user_id}", json={"password": password})
        self._json(response, "update password")

    def get_user(self, access_token: str) -> IdentityUser:
        """Resolve the user owning an access token issued by the provider."""
        if not access_token:
            raise AuthError("Missing token")
        response = self._request("GET", "/auth/v1/user", bearer=access_token)
        if response.status_code in (401, 403):
            raise AuthError("Invalid token")
        return IdentityUser.from_payload(self._json(response, "resolve token"))
