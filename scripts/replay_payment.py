#!/usr/bin/env python3
"""
Re-apply a payment notification by hand, e.g. after a webhook was acknowledged
with "Internal processing error".

Usage:
  python scripts/replay_payment.py --email buyer@example.com --amount 10 [--status completed] [--contract-id abc]
"""
from __future__ import annotations

import argparse

from dotenv import load_dotenv

from aura_api.core.config import get_settings
from aura_api.core.errors import ServiceError
from aura_api.core.identity import SupabaseIdentity
from aura_api.core.mailer import Mailer
from aura_api.domain.tariffs import TariffCatalog, normalize_amount
from aura_api.domain.webhook import STATUS_COMPLETED, WebhookEvent
from aura_api.repositories.sql_repository import SQLRepository
from aura_api.services.reconciler import WebhookReconciler


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay a lava.top payment notification")
    ap.add_argument("--email", required=True, help="Buyer email")
    ap.add_argument("--amount", required=True, help="Paid amount (e.g. 10)")
    ap.add_argument("--status", default=STATUS_COMPLETED, help="Payment status (default: completed)")
    ap.add_argument("--contract-id", help="Gateway contract id, for the logs")
    args = ap.parse_args()

    load_dotenv()
    settings = get_settings()
    identity = SupabaseIdentity.from_settings(settings)
    reconciler = WebhookReconciler(
        settings=settings,
        repository=SQLRepository(),
        identity=identity,
        mailer=Mailer(settings),
        tariffs=TariffCatalog.from_config(settings.tariff_catalog),
    )
    event = WebhookEvent(
        status=args.status,
        buyer_email=args.email.strip(),
        amount=normalize_amount(args.amount),
        contract_id=args.contract_id,
    )
    try:
        result = reconciler.reconcile(event)
    except ServiceError as exc:
        raise SystemExit(f"Replay failed: {exc.message}") from exc
    finally:
        identity.close()

    print(f"OK: {result.outcome.value}")
    if result.course_id:
        print(f"  Course: {result.course_id}")
    if result.email_sent is not None:
        print(f"  Welcome email sent: {result.email_sent}")


if __name__ == "__main__":
    main()
