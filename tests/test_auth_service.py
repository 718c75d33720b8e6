from __future__ import annotations

from urllib.parse import parse_qs, urlparse
import re

import pytest

from aura_api.core.errors import NotFoundError, UpstreamError, ValidationError


def _code_from(mail: dict) -> str:
    return re.search(r"(\d{4})", mail["text"]).group(1)


def _token_from(mail: dict) -> str:
    url = re.search(r"(https://\S+)", mail["text"]).group(1)
    return parse_qs(urlparse(url).query)["token"][0]


def test_send_and_confirm_code(auth_service, repo, mailer):
    auth_service.send_confirmation_code("dave@example.com")

    code = _code_from(mailer.sent[0])
    assert repo.get_latest_confirmation("dave@example.com").code == code
    assert 1000 <= int(code) <= 9999

    auth_service.confirm_email("dave@example.com", int(code))
    assert repo.get_latest_confirmation("dave@example.com") is None

    with pytest.raises(NotFoundError):
        auth_service.confirm_email("dave@example.com", code)


def test_new_code_supersedes_previous(auth_service, repo, mailer):
    auth_service.send_confirmation_code("dave@example.com")
    repo.replace_confirmation_code("dave@example.com", "1234")

    with pytest.raises(ValidationError) as exc:
        auth_service.confirm_email("dave@example.com", "4321")
    assert exc.value.message == "Not correct code"

    auth_service.confirm_email("dave@example.com", "1234")


def test_send_code_reports_mail_failure(auth_service, mailer):
    mailer.ok = False

    with pytest.raises(UpstreamError) as exc:
        auth_service.send_confirmation_code("dave@example.com")
    assert exc.value.message == "Email not sent"


def test_password_reset_flow(auth_service, repo, supabase, mailer):
    supabase.add_user("erin@example.com")

    auth_service.issue_password_reset("erin@example.com")
    mail = mailer.sent[0]
    assert "/app/resetPassword?email=erin%40example.com&token=" in mail["text"]
    token = _token_from(mail)

    auth_service.reset_password("erin@example.com", token, "new-secret", "new-secret")

    assert supabase.users["erin@example.com"]["password"] == "new-secret"
    assert repo.get_reset_token("erin@example.com", token) is None
    with pytest.raises(NotFoundError):
        auth_service.reset_password("erin@example.com", token, "again-123", "again-123")


def test_reset_validation_happens_before_token_lookup(auth_service, repo, supabase):
    repo.replace_reset_token("erin@example.com", "tok")

    with pytest.raises(ValidationError) as mismatch:
        auth_service.reset_password("erin@example.com", "tok", "secret-1", "secret-2")
    with pytest.raises(ValidationError) as short:
        auth_service.reset_password("erin@example.com", "tok", "abc", "abc")
    with pytest.raises(ValidationError) as missing:
        auth_service.reset_password("erin@example.com", "", "secret-1", "secret-1")

    assert mismatch.value.message == "Passwords do not match"
    assert short.value.message.startswith("Password must be at least")
    assert missing.value.message == "All fields are required"
    assert repo.get_reset_token("erin@example.com", "tok") is not None
    assert supabase.requests == []


def test_reset_keeps_token_when_user_is_unknown(auth_service, repo):
    repo.replace_reset_token("ghost@example.com", "tok")

    with pytest.raises(NotFoundError) as exc:
        auth_service.reset_password("ghost@example.com", "tok", "secret-1", "secret-1")

    assert exc.value.message == "User not found"
    assert repo.get_reset_token("ghost@example.com", "tok") is not None


def test_reset_keeps_token_when_password_update_fails(auth_service, repo, supabase):
    supabase.add_user("erin@example.com")
    supabase.fail_update = True
    repo.replace_reset_token("erin@example.com", "tok")

    with pytest.raises(UpstreamError):
        auth_service.reset_password("erin@example.com", "tok", "secret-1", "secret-1")

    assert supabase.users["erin@example.com"]["password"] == "old-password"
    assert repo.get_reset_token("erin@example.com", "tok") is not None
