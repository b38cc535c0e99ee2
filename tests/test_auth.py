import pytest
from jose import jwt

from topup import auth, config, crud
from topup.errors import AuthError, ValidationError
from topup.models import AdminAccount
from topup.security import hash_password, verify_password
from topup.sessions import SessionStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_seed_admin_created_once(db):
    crud.init_db()
    crud.init_db()

    admins = db.query(AdminAccount).all()
    assert len(admins) == 1
    assert admins[0].username == "admin"
    assert admins[0].must_rotate is True
    assert admins[0].password_hash != "changeit"
    assert verify_password("changeit", admins[0].password_hash)


def test_password_hash_is_salted():
    assert hash_password("secret-pass") != hash_password("secret-pass")
    assert not verify_password("wrong", hash_password("secret-pass"))
    assert not verify_password("secret-pass", "not-a-bcrypt-hash")


def test_login_service(db, store):
    session = auth.login(db, store, "admin", "changeit")

    assert session.username == "admin"
    assert store.get(session.token) is session

    with pytest.raises(AuthError):
        auth.login(db, store, "admin", "wrongpass")
    with pytest.raises(AuthError):
        auth.login(db, store, "nobody", "changeit")
    with pytest.raises(ValidationError):
        auth.login(db, store, "admin", None)
    assert len(store) == 1


def test_session_store_expiry():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    session = store.create(1, "admin")

    clock.now += 59
    assert store.get(session.token) is session

    clock.now += 1
    assert store.get(session.token) is None
    assert len(store) == 0


def test_session_store_destroy_is_idempotent():
    store = SessionStore(ttl_seconds=60)
    session = store.create(1, "admin")

    store.destroy(session.token)
    store.destroy(session.token)
    store.destroy(None)
    assert store.get(session.token) is None


def test_login_sets_cookie(client):
    response = client.post(
        "/api/admin/login", json={"username": "admin", "password": "changeit"}
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert config.SESSION_COOKIE in response.cookies
    assert "httponly" in response.headers["set-cookie"].lower()


def test_login_wrong_password(client, store):
    response = client.post(
        "/api/admin/login", json={"username": "admin", "password": "wrongpass"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized"}
    assert "set-cookie" not in response.headers
    assert len(store) == 0
    assert client.get("/api/admin/orders").status_code == 401


def test_login_missing_fields(client):
    response = client.post("/api/admin/login", json={"username": "admin"})

    assert response.status_code == 400
    assert response.json() == {"error": "missing fields"}


def test_logout_destroys_session(admin_client, store):
    assert admin_client.get("/api/admin/orders").status_code == 200

    response = admin_client.post("/api/admin/logout")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert len(store) == 0
    assert admin_client.get("/api/admin/orders").status_code == 401


def test_logout_without_session(client):
    response = client.post("/api/admin/logout")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_tampered_cookie_rejected(admin_client, store):
    (session,) = list(store._sessions.values())
    forged = jwt.encode({"sid": session.token}, "another-secret", algorithm="HS256")

    admin_client.cookies.clear()
    admin_client.cookies.set(config.SESSION_COOKIE, forged)
    assert admin_client.get("/api/admin/orders").status_code == 401

    admin_client.cookies.set(config.SESSION_COOKIE, "garbage")
    assert admin_client.get("/api/admin/orders").status_code == 401


def test_expired_session_rejected(client, monkeypatch):
    from topup.main import app as fastapi_app

    clock = FakeClock()
    monkeypatch.setattr(fastapi_app.state, "sessions", SessionStore(ttl_seconds=60, clock=clock))

    client.post("/api/admin/login", json={"username": "admin", "password": "changeit"})
    assert client.get("/api/admin/orders").status_code == 200

    clock.now += 61
    response = client.get("/api/admin/orders")
    assert response.status_code == 401
    assert response.json() == {"error": "unauthenticated"}


def test_default_password_usable_outside_production(admin_client):
    assert admin_client.get("/api/admin/orders").status_code == 200


def test_production_requires_rotation(admin_client, monkeypatch):
    monkeypatch.setattr(config, "APP_ENV", "production")

    response = admin_client.get("/api/admin/orders")
    assert response.status_code == 401
    assert response.json() == {"error": "password rotation required"}

    response = admin_client.post(
        "/api/admin/password",
        json={"currentPassword": "changeit", "newPassword": "a-much-better-password"}
    )
    assert response.status_code == 200
    assert admin_client.get("/api/admin/orders").status_code == 200

    # The old password no longer works, the new one does
    admin_client.post("/api/admin/logout")
    assert admin_client.post(
        "/api/admin/login", json={"username": "admin", "password": "changeit"}
    ).status_code == 401
    assert admin_client.post(
        "/api/admin/login", json={"username": "admin", "password": "a-much-better-password"}
    ).status_code == 200
    assert admin_client.get("/api/admin/orders").status_code == 200


def test_change_password_validation(admin_client):
    cases = [
        ({"currentPassword": "changeit"}, 400, "missing fields"),
        ({"currentPassword": "changeit", "newPassword": "short"}, 400, "password too short"),
        ({"currentPassword": "changeit", "newPassword": "changeit"}, 400, "password unchanged"),
        ({"currentPassword": "wrong-one", "newPassword": "long-enough-pass"}, 401, "unauthorized"),
    ]
    for body, status, reason in cases:
        response = admin_client.post("/api/admin/password", json=body)
        assert response.status_code == status
        assert response.json() == {"error": reason}


def test_change_password_requires_session(client):
    response = client.post(
        "/api/admin/password",
        json={"currentPassword": "changeit", "newPassword": "long-enough-pass"}
    )
    assert response.status_code == 401


def test_logout_is_logged(admin_client, caplog):
    with caplog.at_level("INFO", logger="topup.auth"):
        admin_client.post("/api/admin/logout")

    assert "Admin 'admin' logged out" in caplog.text
