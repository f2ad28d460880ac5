import pytest

from app.core.config import settings
from app.routes import auth_router


@pytest.fixture
def outbox(monkeypatch):
    """Captures magic links instead of sending them through SendGrid."""
    sent = {}

    def fake_send(recipient, token):
        sent[recipient] = token
        return True
    monkeypatch.setattr(auth_router, "send_email_link", fake_send)
    return sent


def login(client, outbox, email):
    client.post("/auth/request-token", json={"email": email})
    res = client.get(f"/auth/verify-token?token={outbox[email]}")
    assert res.status_code == 200
    return res.json()["access_token"]


def test_request_token_does_not_return_the_token(anon_client, outbox, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAILS", "boss@charity.org")

    res = anon_client.post("/auth/request-token", json={"email": "boss@charity.org"})
    assert res.status_code == 200
    assert "token" not in res.json()
    assert outbox["boss@charity.org"] not in res.text


def test_request_token_without_sendgrid_key(anon_client):
    res = anon_client.post("/auth/request-token", json={"email": "boss@charity.org"})
    assert res.status_code == 200
    assert set(res.json()) == {"msg"}


def test_admin_login_flow(anon_client, outbox, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAILS", "Boss@Charity.org, treasurer@charity.org")

    access = login(anon_client, outbox, "boss@charity.org")
    res = anon_client.get("/goals/", headers={"Authorization": f"Bearer {access}"})
    assert res.status_code == 200
    assert res.json() == []


def test_non_admin_is_forbidden(anon_client, outbox):
    access = login(anon_client, outbox, "visitor@example.com")
    res = anon_client.get("/goals/", headers={"Authorization": f"Bearer {access}"})
    assert res.status_code == 403


def test_magic_token_is_not_an_access_token(anon_client, outbox):
    anon_client.post("/auth/request-token", json={"email": "boss@charity.org"})
    token = outbox["boss@charity.org"]
    res = anon_client.get("/donations/", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_access_token_cannot_be_verified_again(anon_client, outbox):
    access = login(anon_client, outbox, "visitor@example.com")
    assert anon_client.get(f"/auth/verify-token?token={access}").status_code == 400


def test_garbage_tokens(anon_client):
    assert anon_client.get("/auth/verify-token?token=not-a-jwt").status_code == 401
    res = anon_client.get("/donations/", headers={"Authorization": "Token abc"})
    assert res.status_code == 401


def test_root(anon_client):
    assert anon_client.get("/").json() == {"message": "Welcome to the Donation Analytics API!"}
