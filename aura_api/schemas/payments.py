from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from aura_api.domain.tariffs import normalize_amount
from aura_api.domain.webhook import WebhookEvent


class CreateInvoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=1)
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    tariff: Union[str, int]


class LavaBuyer(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None


class LavaWebhookPayload(BaseModel):
    """
    Body posted by lava.top. Only the fields the reconciler needs are typed;
    everything else is accepted and ignored.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: str = ""
    event_type: Optional[str] = Field(None, alias="eventType")
    contract_id: Optional[str] = Field(None, alias="contractId")
    amount: Optional[Union[int, float, str]] = None
    currency: Optional[str] = None
    buyer: Optional[LavaBuyer] = None

    def to_event(self) -> WebhookEvent:
        return WebhookEvent(
            status=self.status,
            buyer_email=self.buyer.email if self.buyer else None,
            amount=normalize_amount(self.amount) if self.amount is not None else None,
            contract_id=self.contract_id,
        )
