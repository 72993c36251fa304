from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient
import pytest

from pixoul.auth import service as auth_service
from pixoul.auth.identity import Authenticated, Guest, determine_role, from_user_dict, GUEST_ID
from pixoul.utils import security as security_mod
from pixoul.utils.security import get_identity, require_user, require_staff, COOKIE_NAME

def _make_app(demo_mode=False):
    app = FastAPI()
    app.state.demo_mode = demo_mode

    @app.get("/whoami")
    def whoami(identity=Depends(get_identity)):
        return {"id": identity.id, "role": identity.role, "guest": isinstance(identity, Guest)}

    @app.get("/private")
    def private(user=Depends(require_user)):
        return {"id": user.id}

    @app.get("/kitchen")
    def kitchen(user=Depends(require_staff("kitchen"))):
        return {"ok": True}

    return app

def _patch_users(monkeypatch, users):
    def _lookup(token):
        user = users.get(token)
        if user is None:
            raise RuntimeError("invalid JWT")
        return user
    monkeypatch.setattr("pixoul.auth.service._repo_get_user_from_token", _lookup)

def test_determine_role():
    assert determine_role({"role": "Kitchen"}) == "kitchen"
    assert determine_role({"role": "manager"}) == "manager"
    assert determine_role({"role": "admin"}) == "customer"
    assert determine_role(None) == "customer"

def test_from_user_dict_reads_metadata():
    user = from_user_dict({"id": "u1", "email": "a@b.c", "user_metadata": {"role": "events"}}, token="t")
    assert user == Authenticated(id="u1", email="a@b.c", role="events", metadata={"role": "events"}, token="t")
    assert user.is_staff and user.can_manage("events") and not user.can_manage("kitchen")

def test_manager_can_manage_every_area():
    boss = Authenticated(id="m", email="m@x", role="manager")
    assert all(boss.can_manage(a) for a in ("kitchen", "bookings", "events"))

def test_demo_mode_yields_guest_without_token():
    client = TestClient(_make_app(demo_mode=True))
    r = client.get("/whoami")
    assert r.status_code == 200
    assert r.json() == {"id": GUEST_ID, "role": "customer", "guest": True}
    # l'invité ne passe pas les routes protégées
    assert client.get("/private").status_code == 401

def test_demo_flag_is_read_per_request():
    app = _make_app(demo_mode=True)
    client = TestClient(app)
    assert client.get("/whoami").status_code == 200
    app.state.demo_mode = False
    assert client.get("/whoami").status_code == 401

def test_missing_token_is_401():
    r = TestClient(_make_app()).get("/whoami")
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authenticated"

def test_bearer_then_cookie(monkeypatch):
    _patch_users(monkeypatch, {
        "tok-bearer": {"id": "u-bearer", "email": "b@x"},
        "tok-cookie": {"id": "u-cookie", "email": "c@x"},
    })
    client = TestClient(_make_app())
    r = client.get("/whoami", headers={"Authorization": "Bearer tok-bearer"})
    assert r.json()["id"] == "u-bearer"
    client.cookies.set(COOKIE_NAME, "tok-cookie")
    assert client.get("/whoami").json()["id"] == "u-cookie"
    assert client.get("/whoami", headers={"Authorization": "Bearer tok-bearer"}).json()["id"] == "u-bearer"

def test_rejected_token_is_401(monkeypatch):
    _patch_users(monkeypatch, {})
    r = TestClient(_make_app()).get("/private", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Session expired, please sign in again"

def test_unknown_user_id_is_401(monkeypatch):
    _patch_users(monkeypatch, {"tok": {}})
    r = TestClient(_make_app()).get("/private", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401

def test_staff_gate(monkeypatch):
    _patch_users(monkeypatch, {
        "cust": {"id": "c", "email": "c@x"},
        "cook": {"id": "k", "email": "k@x", "user_metadata": {"role": "kitchen"}},
        "desk": {"id": "d", "email": "d@x", "user_metadata": {"role": "bookings"}},
        "boss": {"id": "m", "email": "m@x", "user_metadata": {"role": "manager"}},
    })
    client = TestClient(_make_app())
    status = {t: client.get("/kitchen", headers={"Authorization": f"Bearer {t}"}).status_code for t in ("cust", "cook", "desk", "boss")}
    assert status == {"cust": 403, "cook": 200, "desk": 403, "boss": 200}

def test_auth_service_normalizes_user(monkeypatch):
    _patch_users(monkeypatch, {"tok": {"id": "u1", "email": "a@b.c", "user_metadata": {"name": "A"}}})
    user = auth_service.get_user_from_token("tok")
    assert user.id == "u1" and user.token == "tok" and user.role == "customer"
