"""Auth Routes — sign-up, login, refresh, logout and login history.

Invariants:
    - Duplicate email → 409; invalid sign-up input → 400
    - Wrong password → 401 INVALID_CREDENTIALS and a FAILED login history row
    - Logout revokes the access token (401 TOKEN_REVOKED afterwards) and the refresh token
    - Login and logout purge blacklist and refresh-token rows that are past expiry
    - Protected endpoints without a token → 401 with WWW-Authenticate: Bearer
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from promptserver.models.auth_token import RefreshToken, TokenBlacklist
from promptserver.models.login_history import LoginHistory
from promptserver.models.user import User
from tests.services.api_helpers import DEFAULT_PASSWORD, sign_in


async def _login(client, email, password=DEFAULT_PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


# --- Sign-up ---

async def test_signup_returns_201_with_lowercased_email(client):
    res = await client.post("/api/auth/signup", json={
        "email": "New.User@Example.com", "password": DEFAULT_PASSWORD, "name": "New",
    })
    assert res.status_code == 201
    data = res.json()
    assert data["email"] == "new.user@example.com"
    assert data["uuid"]
    assert "password_hash" not in data


async def test_signup_duplicate_email_returns_409(client):
    body = {"email": "dup@example.com", "password": DEFAULT_PASSWORD, "name": "Dup"}
    await client.post("/api/auth/signup", json=body)
    res = await client.post("/api/auth/signup", json=body)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_RESOURCE"


async def test_signup_weak_password_returns_400(client):
    res = await client.post("/api/auth/signup", json={
        "email": "weak@example.com", "password": "password", "name": "Weak",
    })
    assert res.status_code == 400
    assert res.json()["error"]["context"]["field"] == "password"


# --- Login ---

async def test_login_returns_token_pair(client):
    await sign_in(client, "login@example.com")
    res = await _login(client, "LOGIN@example.com")
    assert res.status_code == 200
    data = res.json()
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 3600
    assert data["access_token"] != data["refresh_token"]


async def test_wrong_password_returns_401_and_records_failure(client, test_db):
    await sign_in(client, "fail@example.com")
    res = await _login(client, "fail@example.com", "wrong-pass1!")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "INVALID_CREDENTIALS"
    assert res.headers["www-authenticate"] == "Bearer"

    rows = (await test_db.execute(
        select(LoginHistory).where(LoginHistory.email == "fail@example.com"),
    )).scalars().all()
    assert sorted(r.status for r in rows) == ["FAILED", "SUCCESS"]


async def test_unknown_email_recorded_without_user(client, test_db):
    res = await _login(client, "nobody@example.com")
    assert res.status_code == 401
    row = await test_db.scalar(
        select(LoginHistory).where(LoginHistory.email == "nobody@example.com"),
    )
    assert row.user_id is None
    assert row.status == "FAILED"


# --- Tokens ---

async def test_protected_endpoint_without_token_returns_401(client):
    res = await client.get("/api/auth/login-history")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_garbage_token_returns_401(client):
    res = await client.get(
        "/api/auth/login-history", headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "INVALID_TOKEN"


async def test_refresh_issues_new_access_token(client):
    await sign_in(client, "refresh@example.com")
    tokens = (await _login(client, "refresh@example.com")).json()
    res = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    data = res.json()
    assert data["refresh_token"] == tokens["refresh_token"]
    assert data["access_token"] != tokens["access_token"]


async def test_access_token_cannot_refresh(client):
    headers = await sign_in(client, "mixup@example.com")
    access = headers["Authorization"].split(" ", 1)[1]
    res = await client.post("/api/auth/refresh", json={"refresh_token": access})
    assert res.status_code == 401


async def test_logout_revokes_access_and_refresh_tokens(client):
    await sign_in(client, "bye@example.com")
    tokens = (await _login(client, "bye@example.com")).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    res = await client.post("/api/auth/logout", headers=headers)
    assert res.status_code == 204

    res = await client.get("/api/auth/login-history", headers=headers)
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "TOKEN_REVOKED"

    res = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 401


async def _add_expired_tokens(test_db, email):
    user = await test_db.scalar(select(User).where(User.email == email))
    past = datetime.now(timezone.utc) - timedelta(days=1)
    test_db.add(TokenBlacklist(jti="stale-jti", expires_at=past))
    test_db.add(RefreshToken(user_id=user.id, token="stale-refresh", expires_at=past))
    await test_db.commit()


async def _stored_tokens(test_db):
    jtis = (await test_db.execute(select(TokenBlacklist.jti))).scalars().all()
    refresh = (await test_db.execute(select(RefreshToken.token))).scalars().all()
    return list(jtis), list(refresh)


async def test_login_purges_expired_token_rows(client, test_db):
    await sign_in(client, "purge@example.com")
    await _add_expired_tokens(test_db, "purge@example.com")

    res = await _login(client, "purge@example.com")
    assert res.status_code == 200

    jtis, refresh = await _stored_tokens(test_db)
    assert jtis == []
    assert "stale-refresh" not in refresh
    assert res.json()["refresh_token"] in refresh


async def test_logout_purges_expired_blacklist_rows(client, test_db):
    headers = await sign_in(client, "purge@example.com")
    await _add_expired_tokens(test_db, "purge@example.com")

    res = await client.post("/api/auth/logout", headers=headers)
    assert res.status_code == 204

    jtis, refresh = await _stored_tokens(test_db)
    assert len(jtis) == 1 and "stale-jti" not in jtis
    assert refresh == []


# --- Login history ---

async def test_login_history_newest_first_with_client_details(client):
    headers = await sign_in(client, "history@example.com")
    await _login(client, "history@example.com", "wrong-pass1!")
    res = await client.get(
        "/api/auth/login-history", params={"limit": 5},
        headers={**headers, "User-Agent": "pytest-agent", "X-Forwarded-For": "203.0.113.5"},
    )
    assert res.status_code == 200
    history = res.json()
    assert [h["status"] for h in history] == ["FAILED", "SUCCESS"]
    assert history[1]["ip_address"] == "127.0.0.1"


async def test_login_records_forwarded_ip_and_user_agent(client, test_db):
    await sign_in(client, "ip@example.com")
    await client.post(
        "/api/auth/login",
        json={"email": "ip@example.com", "password": DEFAULT_PASSWORD},
        headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "User-Agent": "agent/1.0"},
    )
    row = await test_db.scalar(
        select(LoginHistory)
        .where(LoginHistory.email == "ip@example.com")
        .order_by(LoginHistory.id.desc()),
    )
    assert row.ip_address == "203.0.113.5"
    assert row.user_agent == "agent/1.0"
