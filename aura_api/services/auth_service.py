"""
Email confirmation codes and password reset use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
import html
import logging
import secrets

from aura_api.core.config import Settings
from aura_api.core.errors import NotFoundError, UpstreamError, ValidationError
from aura_api.core.identity import SupabaseIdentity
from aura_api.core.mailer import Mailer
from aura_api.core.security import generate_code, generate_reset_token
from aura_api.core.utils import absolute_url
from aura_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

RESET_PASSWORD_PATH = "/app/resetPassword"


@dataclass
class AuthService:
    """Handles email verification codes and the password reset flow."""

    settings: Settings
    repository: SQLRepository
    identity: SupabaseIdentity
    mailer: Mailer

    # -------------------------------------- helpers --------------------------------------
    def _clean_email(self, email: str) -> str:
        value = (email or "").strip()
        if not value:
            raise ValidationError("Email is required")
        return value

    def _code_email_html(self, code: str) -> str:
        return f"""
        <h3>Thank you for signing up.</h3>
        <p>Enter the following code on the website to confirm your email:</p>
        <h2 style="color: #007bff;">Your code: <strong>{html.escape(code)}</strong></h2>
        <p>If you did not sign up at neuro-aura.com, simply ignore this message.</p>
        <p>Best regards,<br>Support team</p>
        """

    def _reset_email_html(self, reset_url: str) -> str:
        url = html.escape(reset_url, quote=True)
        return f"""
        <h3>Password reset</h3>
        <p>Follow the link to reset your password:</p>
        <h2 style="color: #007bff;"><a href="{url}"><strong>Reset password</strong></a></h2>
        <p>If you did not request a password reset at neuro-aura.com, simply ignore this message.</p>
        <p>Best regards,<br>Support team</p>
        """

    # -------------------------------------- email codes --------------------------------------
    def send_confirmation_code(self, email: str) -> None:
        """Issue a fresh code for ``email`` (replacing any pending one) and mail it."""
        address = self._clean_email(email)
        code = generate_code()
        self.repository.replace_confirmation_code(address, code)
        sent = self.mailer.send(
            f"{self.settings.mail_from_name}: confirmation code",
            address,
            self._code_email_html(code),
            f"Your confirmation code: {code}",
        )
        if not sent:
            raise UpstreamError("Email not sent", provider="smtp")

    def confirm_email(self, email: str, code: object) -> None:
        address = self._clean_email(email)
        supplied = str(code if code is not None else "").strip()
        if not supplied:
            raise ValidationError("Code is required")
        entity = self.repository.get_latest_confirmation(address)
        if not entity:
            raise NotFoundError("Code not correct or Email not found")
        if not secrets.compare_digest(str(entity.code).encode(), supplied.encode()):
            raise ValidationError("Not correct code")
        self.repository.delete_confirmations(address)

    # -------------------------------------- password reset --------------------------------------
    def issue_password_reset(self, email: str) -> None:
        address = self._clean_email(email)
        token = generate_reset_token()
        self.repository.replace_reset_token(address, token)
        reset_url = absolute_url(
            self.settings.public_base_url,
            RESET_PASSWORD_PATH,
            {"email": address, "token": token},
        )
        sent = self.mailer.send(
            f"{self.settings.mail_from_name}: password reset",
            address,
            self._reset_email_html(reset_url),
            f"Use this link to reset your password: {reset_url}",
        )
        if not sent:
            raise UpstreamError("Email not sent", provider="smtp")

    def reset_password(self, email: str, token: str, password: str, password_repeat: str) -> None:
        address = (email or "").strip()
        token_value = (token or "").strip()
        if not (address and token_value and password and password_repeat):
            raise ValidationError("All fields are required")
        if password != password_repeat:
            raise ValidationError("Passwords do not match")
        if len(password) < self.settings.min_password_length:
            raise ValidationError(f"Password must be at least {self.settings.min_password_length} characters")

        with self.repository.claim_reset_token(address, token_value) as entity:
            if entity is None:
                raise NotFoundError("Invalid token or email")
            user = self.identity.find_user_by_email(address)
            if not user:
                raise NotFoundError("User not found")
            self.identity.update_user_password(user.id, password)
        logger.info("[reset] Password changed for %s", address)
