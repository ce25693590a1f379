import asyncio

from dependencies import verify_password
from services.auth_service import initialize_admin_user


def register(client, email="casey@example.com", password="s3cret-pass"):
    return client.post("/auth/register", json={"name": "Casey", "email": email, "password": password})


def login(client, email="casey@example.com", password="s3cret-pass"):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_register_stores_hashed_password(client, fake_db):
    response = register(client)

    assert response.status_code == 201
    stored = fake_db["users"].documents[0]
    assert stored["_id"] == response.json()["user_id"]
    assert stored["role"] == "customer"
    assert stored["password"] != "s3cret-pass"
    assert verify_password("s3cret-pass", stored["password"])


def test_register_rejects_duplicate_email(client):
    register(client)

    response = register(client)

    assert response.status_code == 400


def test_login_returns_token_usable_for_me(client):
    register(client)

    response = login(client)

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "customer"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "casey@example.com"


def test_login_with_wrong_password(client):
    register(client)

    assert login(client, password="wrong-password").status_code == 401
    assert login(client, email="nobody@example.com").status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_missing_credentials_are_rejected(client):
    assert client.get("/api/medicines/").status_code in (401, 403)


def test_only_admins_create_staff(client, fake_db):
    asyncio.run(initialize_admin_user(fake_db, "admin@example.com", "admin-pass"))
    register(client)
    customer_token = login(client).json()["access_token"]
    admin_token = login(client, "admin@example.com", "admin-pass").json()["access_token"]
    staff = {"name": "Pat", "email": "pat@example.com", "password": "pharma-pass", "role": "pharmacist"}

    denied = client.post("/auth/staff", json=staff, headers={"Authorization": f"Bearer {customer_token}"})
    created = client.post("/auth/staff", json=staff, headers={"Authorization": f"Bearer {admin_token}"})

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json()["role"] == "pharmacist"


def test_admin_seeding_runs_once(fake_db):
    first = asyncio.run(initialize_admin_user(fake_db, "admin@example.com", "admin-pass"))
    second = asyncio.run(initialize_admin_user(fake_db, "admin@example.com", "admin-pass"))

    assert first is not None
    assert second is None
    assert len(fake_db["users"].documents) == 1


def test_admin_seeding_skipped_without_credentials(fake_db):
    assert asyncio.run(initialize_admin_user(fake_db, None, None)) is None
    assert fake_db["users"].documents == []
