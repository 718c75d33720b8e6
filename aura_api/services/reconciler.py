"""
Payment webhook reconciliation: turns a gateway notification into an account
and a course entitlement.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import html
import logging
from typing import Optional

from aura_api.core.config import Settings
from aura_api.core.errors import TariffNotFoundError, ValidationError
from aura_api.core.identity import IdentityProviderError, IdentityUser, SupabaseIdentity
from aura_api.core.mailer import Mailer
from aura_api.core.security import generate_password
from aura_api.core.utils import absolute_url
from aura_api.domain.tariffs import Tariff, TariffCatalog
from aura_api.domain.webhook import STATUS_COMPLETED, STATUS_FAILED, WebhookEvent
from aura_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/app/signIn"
# GoTrue answers 422 (older releases 409) when the email is already registered
ALREADY_REGISTERED_STATUSES = (409, 422)


class ReconcileOutcome(str, Enum):
    PAYMENT_FAILED = "payment_failed"
    IGNORED = "ignored"
    ACCOUNT_PROVISIONED = "account_provisioned"
    ACCOUNT_LINKED = "account_linked"
    COURSE_GRANTED = "course_granted"
    ALREADY_GRANTED = "already_granted"


@dataclass
class ReconcileResult:
    outcome: ReconcileOutcome
    email: Optional[str] = None
    course_id: Optional[str] = None
    email_sent: Optional[bool] = None


@dataclass
class WebhookReconciler:
    """
    Applies one payment notification to the user record.

    ``completed`` events grant the tariff's course: a missing profile means a
    new customer, so an identity account is created first (or the one already
    registered for the email is reused) and the profile is written with exactly
    that course; an existing profile gets the course
    appended unless it already holds it. Redelivery of the same event is
    therefore harmless. ``failed`` events are only logged.
    """

    settings: Settings
    repository: SQLRepository
    identity: SupabaseIdentity
    mailer: Mailer
    tariffs: TariffCatalog

    def reconcile(self, event: WebhookEvent) -> ReconcileResult:
        status = event.normalized_status
        if status == STATUS_FAILED:
            logger.warning("[webhook] Payment %s failed", event.contract_id or "<no contract id>")
            return ReconcileResult(ReconcileOutcome.PAYMENT_FAILED)
        if status != STATUS_COMPLETED:
            logger.info("[webhook] Ignoring status %r for contract %s", event.status, event.contract_id)
            return ReconcileResult(ReconcileOutcome.IGNORED)

        email = (event.buyer_email or "").strip()
        if not email:
            raise ValidationError("Buyer email is required")
        # Unknown amounts are rejected before the store is touched.
        try:
            tariff = self.tariffs.by_amount(event.amount)
        except TariffNotFoundError:
            logger.error(
                "[webhook] No tariff for amount %r (contract %s, buyer %s)",
                event.amount,
                event.contract_id,
                email,
            )
            raise

        profile = self.repository.get_profile(email)
        if profile is None:
            return self._provision(email, tariff)

        if self.repository.grant_course(email, tariff.course_id):
            logger.info("[webhook] Granted course %s to %s", tariff.course_id, email)
            return ReconcileResult(ReconcileOutcome.COURSE_GRANTED, email=email, course_id=tariff.course_id)
        logger.info("[webhook] %s already owns course %s", email, tariff.course_id)
        return ReconcileResult(ReconcileOutcome.ALREADY_GRANTED, email=email, course_id=tariff.course_id)

    def _provision(self, email: str, tariff: Tariff) -> ReconcileResult:
        password = generate_password()
        # No profile write unless the identity account exists.
        user, created = self._create_or_find_user(email, password)
        self.repository.save_profile(email, [tariff.course_id], user_id=user.id, has_sub=True)

        if created:
            logger.info("[webhook] Provisioned %s with course %s", email, tariff.course_id)
            outcome = ReconcileOutcome.ACCOUNT_PROVISIONED
            sent = self.mailer.send(
                f"{self.settings.mail_from_name}: access to your course",
                email,
                self._welcome_html(email, password),
                self._welcome_text(email, password),
            )
        else:
            logger.info("[webhook] Linked existing account %s to course %s", email, tariff.course_id)
            outcome = ReconcileOutcome.ACCOUNT_LINKED
            sent = self.mailer.send(
                f"{self.settings.mail_from_name}: access to your course",
                email,
                self._access_html(email),
                self._access_text(email),
            )
        if not sent:
            logger.error("[webhook] Welcome email to %s was not delivered; account is active", email)
        return ReconcileResult(outcome, email=email, course_id=tariff.course_id, email_sent=sent)

    def _create_or_find_user(self, email: str, password: str) -> tuple[IdentityUser, bool]:
        """
        Create the identity account, or reuse the one already registered for
        ``email`` (earlier sign-up, or a replay after the profile write failed).
        The flag is True when the account was created by this call.
        """
        try:
            return self.identity.create_user(email, password), True
        except IdentityProviderError as exc:
            if exc.upstream_status not in ALREADY_REGISTERED_STATUSES:
                raise
            existing = self.identity.find_user_by_email(email)
            if existing is None:
                raise
            logger.warning("[webhook] %s is registered as %s but has no profile", email, existing.id)
            return existing, False

    def _sign_in_url(self) -> str:
        return absolute_url(self.settings.public_base_url, SIGN_IN_PATH)

    def _welcome_html(self, email: str, password: str) -> str:
        url = html.escape(self._sign_in_url(), quote=True)
        return f"""
        <h3>Thank you for your purchase!</h3>
        <p>We created an account for you. Use these credentials to sign in:</p>
        <p><strong>Login:</strong> {html.escape(email)}<br>
        <strong>Password:</strong> {html.escape(password)}</p>
        <h2 style="color: #007bff;"><a href="{url}"><strong>Sign in</strong></a></h2>
        <p>We recommend changing the password after your first sign in.</p>
        <p>Best regards,<br>Support team</p>
        """

    def _welcome_text(self, email: str, password: str) -> str:
        return f"Login: {email}\nPassword: {password}\nSign in: {self._sign_in_url()}"

    def _access_html(self, email: str) -> str:
        url = html.escape(self._sign_in_url(), quote=True)
        return f"""
        <h3>Thank you for your purchase!</h3>
        <p>The course is now available in your account <strong>{html.escape(email)}</strong>.</p>
        <h2 style="color: #007bff;"><a href="{url}"><strong>Sign in</strong></a></h2>
        <p>If you do not remember your password, use "Forgot password" on the sign-in page.</p>
        <p>Best regards,<br>Support team</p>
        """

    def _access_text(self, email: str) -> str:
        return f"Your course is available for {email}.\nSign in: {self._sign_in_url()}"
