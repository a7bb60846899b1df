from __future__ import annotations

from security import TokenService


def _login(client, username: str, password: str):
    return client.post("/login", json={"username": username, "password": password})


def test_register_and_login_flow(make_client, auth_config):
    client = make_client(auth_config)

    r = client.post("/register", json={"username": "a", "password": "p"})
    assert r.status_code == 200

    r = client.post("/register", json={"username": "a", "password": "p"})
    assert r.status_code == 400
    assert r.json() == {"error": "Username already exists"}

    r = _login(client, "a", "p")
    assert r.status_code == 200
    assert isinstance(r.json()["token"], str)

    r = _login(client, "a", "wrong")
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid username or password"}

    r = _login(client, "ghost", "p")
    assert r.status_code == 401


def test_seeded_admin_can_login(make_client, auth_config):
    client = make_client(auth_config)
    assert "token" in _login(client, "admin", "password").json()


def test_passwords_are_stored_hashed(make_client, auth_config, db_path):
    client = make_client(auth_config)
    client.post("/register", json={"username": "a", "password": "secret-pw"})
    assert "secret-pw" not in db_path.read_text()


def test_resource_routes_require_a_valid_bearer_token(make_client, auth_config):
    client = make_client(auth_config)

    r = client.get("/api/v1/posts")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}

    r = client.post("/api/v1/posts", json={"t": 1}, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

    token = _login(client, "admin", "password").json()["token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.post("/api/v1/posts", json={"t": 1}, headers=headers).status_code == 200
    assert len(client.get("/api/v1/posts", headers=headers).json()) == 1


def test_unauthorized_requests_never_touch_the_database(make_client, auth_config, db_path):
    client = make_client(auth_config)
    db_path.unlink()

    r = client.get("/api/v1/posts")
    assert r.status_code == 401
    assert not db_path.exists()


def test_expired_or_foreign_tokens_are_rejected(make_client, auth_config):
    client = make_client(auth_config)

    expired = TokenService(auth_config.jwt_secret, expires_in=-60).issue("admin")
    r = client.get("/api/v1/posts", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401

    foreign = TokenService("some-other-secret", expires_in=60).issue("admin")
    r = client.get("/api/v1/posts", headers={"Authorization": f"Bearer {foreign}"})
    assert r.status_code == 401


def test_login_body_is_validated(make_client, auth_config):
    client = make_client(auth_config)
    r = client.post("/login", json={"username": "admin"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_without_authorization_register_fails_and_login_is_absent(make_client, make_config):
    client = make_client(make_config())

    r = client.post("/register", json={"username": "a", "password": "p"})
    assert r.status_code == 500
    assert r.json() == {"error": "Users format is incorrect"}

    assert _login(client, "a", "p").status_code == 404
    # Resource routes are open.
    assert client.get("/api/v1/posts").status_code == 200


def test_register_and_login_with_a_long_password(make_client, auth_config):
    client = make_client(auth_config)
    password = "x" * 100

    r = client.post("/register", json={"username": "long", "password": password})
    assert r.status_code == 200

    assert "token" in _login(client, "long", password).json()
    assert _login(client, "long", "x" * 72).status_code == 401
