"""Payment notification as the reconciler sees it."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class WebhookEvent:
    status: str
    buyer_email: Optional[str] = None
    amount: Optional[str] = None
    contract_id: Optional[str] = None

    @property
    def normalized_status(self) -> str:
        return (self.status or "").strip().lower()
