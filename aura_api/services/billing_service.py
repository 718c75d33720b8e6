"""
Invoice creation and product catalog, proxied to lava.top.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

from aura_api.core.config import Settings
from aura_api.core.errors import ValidationError
from aura_api.core.lava import LavaGateway
from aura_api.domain.tariffs import TariffCatalog
from aura_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


@dataclass
class BillingService:
    settings: Settings
    repository: SQLRepository
    gateway: LavaGateway
    tariffs: TariffCatalog

    def create_invoice(
        self,
        email: str,
        currency: str,
        tariff_id: object,
        payment_method: Optional[str] = None,
    ) -> Any:
        """Open an invoice for a tariff unless the buyer already owns its course."""
        address = (email or "").strip()
        if not address:
            raise ValidationError("Email is required")
        currency_code = (currency or "").strip().upper()
        if not currency_code:
            raise ValidationError("Currency is required")

        tariff = self.tariffs.by_id(tariff_id)
        if tariff.course_id in self.repository.list_courses(address):
            raise ValidationError("Course already purchased")
        if not tariff.offer_id:
            logger.error("[billing] Tariff %s has no offer id configured", tariff.tariff_id)
            raise ValidationError("Tariff is not available for purchase")

        return self.gateway.create_invoice(
            email=address,
            offer_id=tariff.offer_id,
            currency=currency_code,
            buyer_language=self.settings.lava_buyer_language,
            payment_method=payment_method,
        )

    def list_products(self) -> Any:
        return self.gateway.list_products()
