"""
Shared fixtures: a temporary SQLite database plus in-memory stand-ins for the
identity provider, the payment gateway and SMTP.
"""
from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path

import httpx
import pytest

# make aura_api importable without an editable install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from aura_api.app import create_app
from aura_api.core import config as core_config
from aura_api.core.identity import SupabaseIdentity
from aura_api.core.lava import LavaGateway
from aura_api.db import models
from aura_api.db.create_tables import create_all
from aura_api.db import session as db_session
from aura_api.domain.tariffs import DEFAULT_TARIFFS, Tariff, TariffCatalog
from aura_api.repositories.sql_repository import SQLRepository
from aura_api.services.auth_service import AuthService
from aura_api.services.reconciler import WebhookReconciler

WEBHOOK_SECRET = "hook-secret"


class FakeMailer:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: list[dict] = []

    def send(self, subject, to_email, html_body, text_body=None) -> bool:
        self.sent.append({"subject": subject, "to": to_email, "html": html_body, "text": text_body or ""})
        return self.ok


class FakeSupabase:
    """Minimal GoTrue admin API kept in memory."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.fail_create = False
        self.fail_update = False

    def add_user(self, email: str, password: str = "old-password", token: str | None = None) -> dict:
        user = {"id": f"user-{len(self.users) + 1}", "email": email, "password": password}
        self.users[email] = user
        if token:
            self.tokens[token] = email
        return user

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/auth/v1/admin/users" and request.method == "POST":
            if self.fail_create:
                return httpx.Response(500, json={"msg": "database error"})
            body = json.loads(request.content)
            if body["email"] in self.users:
                return httpx.Response(422, json={"msg": "User already registered"})
            user = self.add_user(body["email"], body["password"])
            return httpx.Response(200, json={"id": user["id"], "email": user["email"]})
        if path == "/auth/v1/admin/users" and request.method == "GET":
            users = [{"id": u["id"], "email": u["email"]} for u in self.users.values()]
            return httpx.Response(200, json={"users": users})
        if path.startswith("/auth/v1/admin/users/") and request.method == "PUT":
            if self.fail_update:
                return httpx.Response(500, json={"msg": "database error"})
            user_id = path.rsplit("/", 1)[-1]
            for user in self.users.values():
                if user["id"] == user_id:
                    user["password"] = json.loads(request.content)["password"]
                    return httpx.Response(200, json={"id": user["id"], "email": user["email"]})
            return httpx.Response(404, json={"msg": "User not found"})
        if path == "/auth/v1/user" and request.method == "GET":
            token = request.headers.get("authorization", "")[len("Bearer "):]
            email = self.tokens.get(token)
            if not email:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json={"id": self.users[email]["id"], "email": email})
        return httpx.Response(404)

    def identity(self) -> SupabaseIdentity:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return SupabaseIdentity("https://supabase.test", "service-key", client=client)


class FakeLava:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, text="upstream exploded")
        if request.url.path == "/api/v2/invoice":
            return httpx.Response(200, json={"id": "inv-1", "paymentUrl": "https://pay.test/inv-1"})
        if request.url.path == "/api/v2/products":
            return httpx.Response(200, json={"items": [{"id": "prod-1", "title": "Course 1"}]})
        return httpx.Response(404)

    def gateway(self, api_key: str = "lava-key") -> LavaGateway:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return LavaGateway("https://gate.test", api_key, client=client)


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Temporary SQLite database with every table created."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    create_all(engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def settings(db_env, tmp_path):
    return dataclasses.replace(
        core_config.get_settings(),
        public_base_url="https://www.neuro-aura.com",
        uploads_dir=str(tmp_path / "uploads"),
        rate_limit_enabled=False,
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture()
def repo(db_env):
    return SQLRepository()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def supabase():
    return FakeSupabase()


@pytest.fixture()
def lava():
    return FakeLava()


@pytest.fixture()
def tariffs():
    """Default catalog plus a second course sold without a lava offer."""
    return TariffCatalog([*DEFAULT_TARIFFS, Tariff(tariff_id="pro", course_id="2", amount="20")])


@pytest.fixture()
def auth_service(settings, repo, supabase, mailer):
    return AuthService(settings=settings, repository=repo, identity=supabase.identity(), mailer=mailer)


@pytest.fixture()
def reconciler(settings, repo, supabase, mailer, tariffs):
    return WebhookReconciler(
        settings=settings,
        repository=repo,
        identity=supabase.identity(),
        mailer=mailer,
        tariffs=tariffs,
    )


@pytest.fixture()
def make_client(settings, repo, supabase, lava, mailer, tariffs):
    """Build a TestClient; keyword arguments override Settings fields."""
    clients = []

    def _make(**overrides) -> TestClient:
        app = create_app(
            dataclasses.replace(settings, **overrides),
            repository=repo,
            identity=supabase.identity(),
            gateway=lava.gateway(),
            mailer=mailer,
            tariffs=tariffs,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture()
def client(make_client):
    return make_client()
