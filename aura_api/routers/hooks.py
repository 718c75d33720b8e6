import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from aura_api.core.errors import NotFoundError, ValidationError
from aura_api.routers.deps import get_reconciler, require_webhook_key
from aura_api.schemas.payments import LavaWebhookPayload
from aura_api.services.reconciler import WebhookReconciler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hooks"], dependencies=[Depends(require_webhook_key)])


def _handle(payload: LavaWebhookPayload, reconciler: WebhookReconciler, source: str):
    event = payload.to_event()
    logger.info("[webhook:%s] status=%s contract=%s", source, event.status, event.contract_id)
    try:
        result = reconciler.reconcile(event)
    except (ValidationError, NotFoundError):
        # unknown tariff / missing buyer: answered with 400 by the app handler
        raise
    except Exception:
        # Acknowledged so the gateway does not redeliver; replay with scripts/replay_payment.py
        logger.exception("[webhook:%s] Processing failed for contract %s", source, event.contract_id)
        return JSONResponse(
            status_code=200,
            content={"success": False, "message": "Webhook received", "error": "Internal processing error"},
        )
    return {"success": True, "message": "Webhook received", "outcome": result.outcome.value}


@router.post("/lava-webhook")
def lava_webhook(payload: LavaWebhookPayload, reconciler: WebhookReconciler = Depends(get_reconciler)):
    return _handle(payload, reconciler, "one-time")


@router.post("/lava-webhook-recurrent")
def lava_webhook_recurrent(payload: LavaWebhookPayload, reconciler: WebhookReconciler = Depends(get_reconciler)):
    return _handle(payload, reconciler, "recurrent")
