import os
import tempfile

# settings are read at import time, so the environment comes first
_DB_PATH = os.path.join(tempfile.gettempdir(), f"dentflow-test-{os.getpid()}.db")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ.setdefault("LOG_LEVEL", "WARNING")
for key in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ[key] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from dentflow.core.db import Base, SessionLocal, engine
from dentflow.core.security import hash_password
from dentflow.main import app
from dentflow.models.user import User, RoleEnum


@pytest.fixture(autouse=True)
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _register_and_login(client: AsyncClient, email: str) -> dict:
    r = await client.post("/api/auth/register", json={
        "username": email.split("@")[0],
        "email": email,
        "phone": "9876543210",
        "password": "secret123",
    })
    assert r.status_code == 201, r.text
    r = await client.post("/api/auth/login", json={"email": email, "password": "secret123"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
async def auth_headers(client):
    return await _register_and_login(client, "dentist@clinicmail.com")


@pytest.fixture
async def other_headers(client):
    return await _register_and_login(client, "other@clinicmail.com")


@pytest.fixture
async def admin_headers(client):
    async with SessionLocal() as db:
        db.add(User(
            email="admin@clinicmail.com",
            username="admin",
            phone="9000000000",
            role=RoleEnum.admin,
            hashed_password=hash_password("admin123"),
        ))
        await db.commit()
    r = await client.post("/api/auth/login", json={"email": "admin@clinicmail.com", "password": "admin123"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def patient_payload():
    return {
        "firstName": "Asha",
        "lastName": "Rao",
        "dob": "1990-04-12",
        "gender": "Female",
        "phone": "9876543210",
        "email": "Asha.Rao@Example.com",
        "city": "Pune",
        "medicalHistory": {"asthma": True, "takingMedicine": "Yes", "medicineDetails": "Inhaler"},
        "initialVisit": {
            "chiefComplaint": "Pain in lower molar",
            "triggerFactors": "Cold",
            "procedures": [
                {"visitDate": "2024-01-10", "procedure": "Scaling", "total": "1,200", "paid": "200"},
                {"procedure": "", "total": "", "paid": ""},
            ],
        },
    }


@pytest.fixture
async def patient(client, auth_headers, patient_payload):
    r = await client.post("/api/patients", json=patient_payload, headers=auth_headers)
    assert r.status_code == 201, r.text
    return r.json()
