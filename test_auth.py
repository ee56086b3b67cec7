# test_auth.py
from passlib.context import CryptContext

from incident_edge.store import DataStoreError


def _register(client, **overrides):
    form = {"name": "Amina Otieno", "email": "amina@example.com", "password": "s3cret-pass", "role": "user"}
    form.update(overrides)
    return client.post("/register", data=form)

def _user_rows(store):
    return store.select("users")


# ---------- Register ----------

def test_register_then_login_round_trip(client):
    resp = _register(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == 200
    assert body["message"] == "User registered successfully"
    assert body["data"]["email"] == "amina@example.com"
    assert "password" not in body["data"]

    resp = client.post("/login", data={"email": "amina@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200
    login = resp.json()
    assert login["message"] == "Login successful"
    assert login["data"]["userid"] == body["data"]["userid"]
    assert login["data"]["role"] == "user"
    assert "password" not in login["data"]

def test_register_stores_a_credential_not_the_password(client, store):
    _register(client)
    row = _user_rows(store)[0]
    assert row["password"] != "s3cret-pass"
    assert row["password"].startswith("$bcrypt-sha256$")

def test_register_duplicate_email_rejected(client, store):
    assert _register(client).status_code == 200
    resp = _register(client, name="Someone Else")
    assert resp.status_code == 400
    assert resp.json() == {"status": 400, "message": "Email already exists", "data": None}
    assert len(_user_rows(store)) == 1

def test_register_missing_field(client, store):
    resp = _register(client, password="   ")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing required field: password"
    assert _user_rows(store) == []

def test_register_invalid_role_names_allowed_set(client):
    resp = _register(client, role="moderator")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid role: moderator. Valid roles are user, admin, super_admin"

def test_register_role_is_case_insensitive_and_normalized(client, store):
    resp = _register(client, role="Super_Admin")
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "super_admin"
    assert _user_rows(store)[0]["role"] == "super_admin"

def test_register_lookup_failure_is_500(client, store, monkeypatch):
    def _boom(*args, **kwargs):
        raise DataStoreError("connection refused")
    monkeypatch.setattr(store, "find_one", _boom)

    resp = _register(client)
    assert resp.status_code == 500
    assert resp.json()["message"] == "Error checking email"

def test_register_requires_post(client):
    resp = client.get("/register")
    assert resp.status_code == 405
    assert resp.json() == {"status": 405, "message": "Method Not Allowed", "data": None}


# ---------- Login ----------

def test_login_wrong_password(client):
    _register(client)
    resp = client.post("/login", data={"email": "amina@example.com", "password": "not-it"})
    assert resp.status_code == 400
    assert resp.json()["data"] is None

def test_login_unknown_email_looks_like_wrong_password(client):
    _register(client)
    unknown = client.post("/login", data={"email": "nobody@example.com", "password": "s3cret-pass"})
    wrong = client.post("/login", data={"email": "amina@example.com", "password": "nope"})
    assert unknown.status_code == wrong.status_code == 400
    assert unknown.json()["message"] == wrong.json()["message"]

def test_login_missing_field(client):
    resp = client.post("/login", data={"email": "amina@example.com"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing required field: password"

def test_login_upgrades_legacy_bcrypt_credential(client, store):
    legacy = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4).hash("old-pass")
    user = store.insert("users", {"name": "Legacy", "email": "legacy@example.com",
                                  "password": legacy, "role": "admin"})

    resp = client.post("/login", data={"email": "legacy@example.com", "password": "old-pass"})
    assert resp.status_code == 200

    stored = store.find_one("users", "userid", user["userid"])["password"]
    assert stored != legacy
    assert stored.startswith("$bcrypt-sha256$")

    # the upgraded credential keeps working
    resp = client.post("/login", data={"email": "legacy@example.com", "password": "old-pass"})
    assert resp.status_code == 200

def test_login_with_unreadable_credential_is_500(client, store):
    store.insert("users", {"name": "Old", "email": "old@example.com",
                           "password": "a1b2c3:deadbeef", "role": "user"})
    resp = client.post("/login", data={"email": "old@example.com", "password": "anything"})
    assert resp.status_code == 500
    assert resp.json() == {"status": 500, "message": "Internal Server Error", "data": None}


# ---------- Store failures and races ----------

def _fail_with(exc):
    def _boom(*args, **kwargs):
        raise exc
    return _boom

def test_register_insert_failure_is_500(client, store, monkeypatch):
    monkeypatch.setattr(store, "insert", _fail_with(DataStoreError("disk full")))
    resp = _register(client)
    assert resp.status_code == 500
    assert resp.json() == {"status": 500, "message": "Error registering user", "data": None}

def test_register_losing_a_race_on_same_email_is_400(client, store, monkeypatch):
    """
    Both requests pass the lookup; the unique index on users.email rejects
    the second insert and that still reads as a duplicate email.
    """
    assert _register(client).status_code == 200
    monkeypatch.setattr(store, "find_one", lambda *args, **kwargs: None)

    resp = _register(client, name="Racer")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"
    assert len(_user_rows(store)) == 1

def test_register_email_is_case_insensitive(client, store):
    assert _register(client, email="Amina@Example.com").status_code == 200
    assert _user_rows(store)[0]["email"] == "amina@example.com"

    resp = _register(client, email="amina@example.COM")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"
    assert len(_user_rows(store)) == 1

def test_login_email_is_case_insensitive(client):
    _register(client)
    resp = client.post("/login", data={"email": "  AMINA@example.com ", "password": "s3cret-pass"})
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == "amina@example.com"

def test_login_lookup_failure_is_500(client, store, monkeypatch):
    _register(client)
    monkeypatch.setattr(store, "find_one", _fail_with(DataStoreError("connection reset")))
    resp = client.post("/login", data={"email": "amina@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 500
    assert resp.json() == {"status": 500, "message": "Error checking email", "data": None}

def test_login_succeeds_when_credential_upgrade_cannot_be_saved(client, store, monkeypatch):
    legacy = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4).hash("old-pass")
    user = store.insert("users", {"name": "Legacy", "email": "legacy@example.com",
                                  "password": legacy, "role": "user"})
    monkeypatch.setattr(store, "update", _fail_with(DataStoreError("read-only replica")))

    resp = client.post("/login", data={"email": "legacy@example.com", "password": "old-pass"})
    assert resp.status_code == 200
    assert resp.json()["data"]["userid"] == user["userid"]
    assert store.find_one("users", "userid", user["userid"])["password"] == legacy
