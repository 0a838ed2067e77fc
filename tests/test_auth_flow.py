import pytest

from conftest import TEST_PASSWORD


@pytest.mark.asyncio
async def test_signup_login_and_session(client):
    r = await client.post(
        "/auth/signup",
        json={"email": "Asha@Example.com", "password": "secret123", "full_name": "Asha"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["roles"] == ["user"]

    r = await client.post("/auth/login", data={"username": "asha@example.com", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    session = r.json()
    assert session["email"] == "asha@example.com"
    assert session["is_admin"] is False
    assert session["id"] == body["id"]


@pytest.mark.asyncio
async def test_signup_rejects_duplicate_email(client, make_user):
    await make_user("taken@example.com")
    r = await client.post("/auth/signup", json={"email": "taken@example.com", "password": "secret123"})
    assert r.status_code == 400
    assert "already exists" in r.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short1", "lettersonly", "12345678"])
async def test_signup_rejects_weak_password(client, password):
    r = await client.post("/auth/signup", json={"email": "weak@example.com", "password": password})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_signup_rejects_invalid_email(client):
    r = await client.post("/auth/signup", json={"email": "not-an-email", "password": "secret123"})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Invalid email address")


@pytest.mark.asyncio
async def test_login_json_and_wrong_password(client, make_user):
    await make_user("json@example.com")
    r = await client.post("/auth/login-json", json={"username": "json@example.com", "password": TEST_PASSWORD})
    assert r.status_code == 200
    assert r.json()["access_token"]

    r = await client.post("/auth/login-json", json={"username": "json@example.com", "password": "wrongpass1"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_session_requires_credentials(client):
    r = await client.get("/auth/session")
    assert r.status_code == 401
    assert r.headers["X-Auth-Reason"] == "No credentials"

    r = await client.get("/auth/session", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.headers["X-Auth-Reason"] == "Invalid token"


@pytest.mark.asyncio
async def test_admin_session_reports_admin_role(client, admin_headers):
    r = await client.get("/auth/session", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["is_admin"] is True
    assert r.json()["roles"] == ["admin", "user"]


@pytest.mark.asyncio
async def test_profile_update_cannot_change_points(client, user_headers):
    r = await client.get("/api/v1/profile/me", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["points"] == 0

    r = await client.patch(
        "/api/v1/profile/me",
        json={"city": "  Pune ", "phone": "9999999999", "points": 500},
        headers=user_headers,
    )
    assert r.status_code == 200
    profile = r.json()
    assert profile["city"] == "Pune"
    assert profile["phone"] == "9999999999"
    assert profile["points"] == 0


@pytest.mark.asyncio
async def test_change_password(client, make_user):
    _, token = await make_user("pw@example.com")
    headers = {"Authorization": f"Bearer {token}"}

    r = await client.post(
        "/api/v1/profile/change-password",
        json={"current_password": "wrongpass1", "new_password": "newpass123"},
        headers=headers,
    )
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/profile/change-password",
        json={"current_password": TEST_PASSWORD, "new_password": TEST_PASSWORD},
        headers=headers,
    )
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/profile/change-password",
        json={"current_password": TEST_PASSWORD, "new_password": "newpass123"},
        headers=headers,
    )
    assert r.status_code == 200

    r = await client.post("/auth/login-json", json={"username": "pw@example.com", "password": "newpass123"})
    assert r.status_code == 200
