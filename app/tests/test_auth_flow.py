from app import crud
from app.config import settings


def register_user(client, email="user@example.com", password="password123", name="Jane Doe"):
    resp = client.post("/api/register", json={"name": name, "email": email, "password": password})
    return resp


def login_user(client, email="user@example.com", password="password123"):
    # FastAPI's OAuth2PasswordRequestForm expects form fields
    resp = client.post(
        "/api/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    return resp


def test_register_then_login_and_me(client):
    # Register
    r = register_user(client)
    assert r.status_code == 201, r.text
    user = r.json()
    assert user["email"] == "user@example.com"
    assert user["is_test_user"] is False

    # Duplicate register should 409
    r2 = register_user(client)
    assert r2.status_code == 409

    # Login
    r3 = login_user(client)
    assert r3.status_code == 200, r3.text
    token = r3.json()["access_token"]
    assert token

    # Access /me
    r4 = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert r4.status_code == 200, r4.text
    me = r4.json()
    assert me["email"] == "user@example.com"
    assert me["name"] == "Jane Doe"


def test_token_accepted_from_cookie(client):
    register_user(client)
    token = login_user(client).json()["access_token"]
    client.cookies.set("access_token", f"Bearer {token}")
    r = client.get("/api/me")
    client.cookies.clear()
    assert r.status_code == 200


def test_login_wrong_password(client):
    register_user(client)
    r = login_user(client, password="not-the-password")
    assert r.status_code == 401


def test_register_rejects_short_password(client):
    r = register_user(client, password="short")
    assert r.status_code == 422


def test_jobs_require_authentication(client):
    assert client.get("/api/jobs").status_code == 401
    assert client.get("/api/jobs", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
    assert client.post("/api/jobs", json={"company": "Acme", "position": "Engineer"}).status_code == 401


def test_ensure_test_user_creates_flagged_account(db_session):
    user = crud.ensure_test_user(db_session, "Test User", "demo@example.com", "password123")
    assert user.is_test_user is True
    again = crud.ensure_test_user(db_session, "Test User", "demo@example.com", "password123")
    assert again.id == user.id


def test_ensure_test_user_flags_existing_account(db_session):
    existing = crud.create_user(db_session, "Jane Doe", "jane@example.com", "password123")
    assert existing.is_test_user is False
    user = crud.ensure_test_user(db_session, "Test User", "jane@example.com", "password123")
    assert user.id == existing.id
    assert user.is_test_user is True


def test_default_token_algorithm():
    assert settings.ALGORITHM == "HS256"
