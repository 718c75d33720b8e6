from __future__ import annotations

WEBHOOK_SECRET = "hook-secret"

HEADERS = {"X-Api-Key": WEBHOOK_SECRET}


def payload(email="buyer@example.com", amount=10, status="completed"):
    return {
        "contractId": "contract-1",
        "status": status,
        "eventType": "payment.success",
        "amount": amount,
        "currency": "RUB",
        "buyer": {"email": email, "name": "Buyer"},
        "timestamp": "2024-01-01T00:00:00Z",
    }


def test_webhook_requires_key(client):
    missing = client.post("/lava-webhook", json=payload())
    wrong = client.post("/lava-webhook", json=payload(), headers={"X-Api-Key": "nope"})

    assert missing.status_code == 401
    assert missing.json() == {"success": False, "error": "Missing API key"}
    assert wrong.status_code == 403
    assert wrong.json()["error"] == "Invalid API key"


def test_webhook_rejected_when_secret_not_configured(make_client):
    client = make_client(webhook_secret="")

    response = client.post("/lava-webhook", json=payload(), headers={"X-Api-Key": "anything"})

    assert response.status_code == 403


def test_completed_payment_provisions_account(client, repo, supabase):
    response = client.post("/lava-webhook", json=payload(amount=10.0), headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Webhook received"
    assert body["outcome"] == "account_provisioned"
    assert repo.list_courses("buyer@example.com") == ["1"]
    assert "buyer@example.com" in supabase.users


def test_recurrent_endpoint_grants_additional_course(client, repo):
    repo.save_profile("buyer@example.com", ["1"], user_id="user-1")

    response = client.post("/lava-webhook-recurrent", json=payload(amount="20.00"), headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["outcome"] == "course_granted"
    assert repo.list_courses("buyer@example.com") == ["1", "2"]


def test_unknown_amount_is_client_error(client, repo):
    response = client.post("/lava-webhook", json=payload(amount=15), headers=HEADERS)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Tariff not found"}
    assert repo.get_profile("buyer@example.com") is None


def test_missing_buyer_email_is_client_error(client):
    body = payload()
    body.pop("buyer")

    response = client.post("/lava-webhook", json=body, headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["error"] == "Buyer email is required"


def test_provider_failure_is_acknowledged(client, repo, supabase):
    supabase.fail_create = True

    response = client.post("/lava-webhook", json=payload(), headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error"] == "Internal processing error"
    assert repo.get_profile("buyer@example.com") is None


def test_failed_payment_is_acknowledged(client, repo):
    response = client.post("/lava-webhook", json=payload(status="failed"), headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["outcome"] == "payment_failed"
    assert repo.get_profile("buyer@example.com") is None
