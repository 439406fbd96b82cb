from app.core.config import settings
from app.core.init import init_super_admin
from app.models import User


def register(client, email="new@example.com", password="secret123", name="Newbie"):
    return client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password},
    )


def test_register_returns_token_and_user(client):
    response = register(client, email="New@Example.com")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == "user"


def test_register_rejects_duplicate_email(client):
    register(client)

    response = register(client)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_register_validates_input(client):
    assert register(client, email="not-an-email").status_code == 422
    assert register(client, password="123").status_code == 422
    assert register(client, name="   ").status_code == 422


def test_password_is_hashed(client, db):
    register(client)

    user = db.query(User).filter(User.email == "new@example.com").one()
    assert user.hashed_password != "secret123"
    assert user.hashed_password.startswith("$2")


def test_login(client):
    register(client)

    response = client.post(
        "/auth/login", json={"email": "new@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"


def test_login_with_wrong_password(client):
    register(client)

    response = client.post(
        "/auth/login", json={"email": "new@example.com", "password": "nope-nope"}
    )

    assert response.status_code == 401


def test_profile(client, user, user_headers):
    response = client.get("/auth/profile", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["id"] == user.id
    assert response.json()["name"] == "Alice"


def test_profile_rejects_bad_tokens(client):
    assert client.get("/auth/profile").status_code == 401
    assert (
        client.get(
            "/auth/profile", headers={"Authorization": "Bearer not-a-token"}
        ).status_code
        == 401
    )


def test_super_admin_is_seeded_once(db):
    init_super_admin(db)
    init_super_admin(db)

    admins = db.query(User).filter(User.role == "admin").all()
    assert len(admins) == 1
    assert admins[0].email == settings.admin_default_email
