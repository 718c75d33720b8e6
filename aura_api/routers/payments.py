from __future__ import annotations

from fastapi import APIRouter, Depends

from aura_api.routers.deps import get_billing_service
from aura_api.schemas.payments import CreateInvoiceRequest
from aura_api.services.billing_service import BillingService

router = APIRouter(tags=["payments"])


@router.post("/create-invoice")
def create_invoice(body: CreateInvoiceRequest, billing: BillingService = Depends(get_billing_service)):
    data = billing.create_invoice(body.email, body.currency, body.tariff, payment_method=body.payment_method)
    return {"success": True, "data": data}


@router.get("/get-products")
def get_products(billing: BillingService = Depends(get_billing_service)):
    return {"success": True, "data": billing.list_products()}
