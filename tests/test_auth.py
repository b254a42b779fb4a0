"""Registration, login and token handling."""


class TestRegister:
    async def test_register_lowercases_email(self, client):
        r = await client.post("/api/auth/register", json={
            "username": "dr", "email": "Dr.Mehta@ClinicMail.com", "phone": "9876543210", "password": "secret123",
        })
        assert r.status_code == 201
        body = r.json()
        assert body["email"] == "dr.mehta@clinicmail.com"
        assert body["role"] == "dentist"
        assert "hashed_password" not in body

    async def test_duplicate_email(self, client, auth_headers):
        r = await client.post("/api/auth/register", json={
            "username": "dup", "email": "DENTIST@clinicmail.com", "phone": "9876543210", "password": "secret123",
        })
        assert r.status_code == 400
        assert r.json() == {"error": "Email already exists"}

    async def test_short_password_is_422(self, client):
        r = await client.post("/api/auth/register", json={
            "username": "dr", "email": "a@clinicmail.com", "phone": "9876543210", "password": "123",
        })
        assert r.status_code == 422
        assert "password" in r.json()["error"]


class TestLogin:
    async def test_wrong_password(self, client, auth_headers):
        r = await client.post("/api/auth/login", json={"email": "dentist@clinicmail.com", "password": "nope"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid email or password"

    async def test_login_returns_user(self, client, auth_headers):
        r = await client.post("/api/auth/login", json={"email": "dentist@clinicmail.com", "password": "secret123"})
        assert r.status_code == 200
        body = r.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "dentist@clinicmail.com"


class TestMe:
    async def test_me(self, client, auth_headers):
        r = await client.get("/api/auth/me", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["username"] == "dentist"

    async def test_missing_token(self, client):
        r = await client.get("/api/auth/me")
        assert r.status_code == 401

    async def test_garbage_token(self, client):
        r = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid token"


async def test_change_password(client, auth_headers):
    r = await client.post("/api/auth/change-password", headers=auth_headers, json={
        "current_password": "wrong", "new_password": "another123",
    })
    assert r.status_code == 400

    r = await client.post("/api/auth/change-password", headers=auth_headers, json={
        "current_password": "secret123", "new_password": "another123",
    })
    assert r.json() == {"ok": True}

    r = await client.post("/api/auth/login", json={"email": "dentist@clinicmail.com", "password": "another123"})
    assert r.status_code == 200


async def test_health(client):
    r = await client.get("/health")
    assert r.json() == {"ok": True}
