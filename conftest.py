# conftest.py
import os
import pytest

# must be set before qrmenu.config builds its Settings
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("APP_SECRET", "test-secret-please-change")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from qrmenu.main import app  # noqa: E402

@pytest.fixture(scope="session")
def base_url():
    # TestClient resolves relative paths against http://testserver
    return ""

@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c

@pytest.fixture(scope="session")
def auth_headers(client, base_url):
    # ensure app is up
    r = client.get(f"{base_url}/healthz")
    assert r.status_code == 200, f"/healthz failed: {r.text}"

    # seed dev data
    r = client.post(f"{base_url}/admin/dev-bootstrap")
    assert r.status_code == 200, f"/admin/dev-bootstrap failed: {r.text}"
    boot = r.json()

    r = client.post(f"{base_url}/auth/login", params={"email": boot["admin_email"], "password": boot["admin_password"]})
    assert r.status_code == 200, f"/auth/login failed: {r.text}"
    tok = r.json()["access_token"]
    return {"Authorization": f"Bearer {tok}"}

@pytest.fixture(scope="session")
def rng_suffix():
    import random, string
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
