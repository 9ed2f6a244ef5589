"""Tests for FastAPI endpoints."""

import string

import pytest
from fastapi.testclient import TestClient
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_vault_opener
from api.main import app
from core import MemoryVault, VaultError, open_vault
from core.jwt_auth import create_access_token


client = TestClient(app)


@pytest.fixture
def vaults():
    """Vaults the provision endpoint will open, by name."""
    opened = {}

    def opener(name):
        return opened.setdefault(name, MemoryVault(name=name))

    app.dependency_overrides[get_vault_opener] = lambda: opener
    yield opened
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(jwt_secret):
    return {"Authorization": f"Bearer {create_access_token('test-pipeline')}"}


PROVISION_BODY = {
    "key_vault_name": "kv-prod",
    "vm_name_prefix": "vm",
    "environment_name": "prod",
    "index": 1,
    "number_of_instances": 3,
    "pad_left_int": 3,
}


class TestPublicEndpoints:
    """Test public endpoints that don't require authentication."""

    def test_root_endpoint(self):
        """Root endpoint should return health status."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_endpoint(self):
        """Health endpoint should return detailed status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "vault_backend" in data

    def test_security_headers(self):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "no-store" in response.headers["Cache-Control"]

    def test_generate_password_default(self):
        """Generate password with default settings."""
        response = client.post("/generate", json={})
        assert response.status_code == 200
        data = response.json()
        assert len(data["password"]) == 12
        assert data["length"] == 12

    def test_generate_password_custom_length(self):
        response = client.post("/generate", json={"length": 32})
        assert response.status_code == 200
        password = response.json()["password"]
        assert len(password) == 32
        assert any(c in string.punctuation for c in password)

    @pytest.mark.parametrize("length", [5, 256])
    def test_generate_password_invalid_length(self, length):
        """Out-of-range length should return 422."""
        response = client.post("/generate", json={"length": length})
        assert response.status_code == 422

    def test_generate_custom_character_sets(self):
        response = client.post("/generate", json={
            "length": 10,
            "character_sets": [
                {"chars": "0123456789", "min_count": 6},
                {"chars": "ab"},
            ],
        })
        assert response.status_code == 200
        password = response.json()["password"]
        assert sum(c.isdigit() for c in password) >= 6
        assert set(password) <= set("0123456789ab")

    def test_generate_unsatisfiable_minimums(self):
        """Minimums larger than the length are rejected with 400."""
        response = client.post("/generate", json={
            "length": 8,
            "character_sets": [{"chars": "abc", "min_count": 5}, {"chars": "123", "min_count": 5}],
        })
        assert response.status_code == 400

    def test_generate_empty_character_set(self):
        response = client.post("/generate", json={"character_sets": [{"chars": ""}]})
        assert response.status_code == 422


class TestProvisionAuth:
    """Test that provisioning requires a valid token."""

    def test_no_auth(self, vaults):
        response = client.post("/provision", json=PROVISION_BODY)
        assert response.status_code == 401

    def test_bad_token(self, vaults, jwt_secret):
        response = client.post(
            "/provision", json=PROVISION_BODY, headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401
        assert vaults == {}


class TestProvisionEndpoint:
    """Test batch provisioning through the API."""

    def test_creates_and_reports(self, vaults, auth_headers):
        response = client.post("/provision", json=PROVISION_BODY, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()

        assert data["vault"] == "kv-prod"
        assert [item["name"] for item in data["items"]] == [
            "VM001-PROD-PASSWORD", "VM002-PROD-PASSWORD", "VM003-PROD-PASSWORD",
        ]
        assert data["created"] == 3
        assert vaults["kv-prod"].list_secrets() == {item["name"] for item in data["items"]}

    def test_passwords_not_returned(self, vaults, auth_headers):
        response = client.post("/provision", json=PROVISION_BODY, headers=auth_headers)
        body = response.text
        vault = vaults["kv-prod"]
        for name in vault.list_secrets():
            assert vault.get_secret(name) not in body

    def test_second_call_skips(self, vaults, auth_headers):
        client.post("/provision", json=PROVISION_BODY, headers=auth_headers)
        data = client.post("/provision", json=PROVISION_BODY, headers=auth_headers).json()
        assert data["skipped"] == 3
        assert data["created"] == 0
        assert len(vaults["kv-prod"].writes) == 3

    def test_listing_failure_returns_502(self, auth_headers):
        class UnreachableVault(MemoryVault):
            def list_secrets(self):
                raise VaultError("network unreachable")

        app.dependency_overrides[get_vault_opener] = lambda: (lambda name: UnreachableVault(name))
        try:
            response = client.post("/provision", json=PROVISION_BODY, headers=auth_headers)
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 502
        assert "network" not in response.text

    @pytest.mark.parametrize("field,value", [
        ("key_vault_name", "kv_prod"),
        ("key_vault_name", "x"),
        ("vm_name_prefix", "vm/../"),
        ("environment_name", "pro d"),
        ("number_of_instances", -1),
        ("pad_left_int", -2),
    ])
    def test_invalid_request(self, vaults, auth_headers, field, value):
        body = dict(PROVISION_BODY, **{field: value})
        response = client.post("/provision", json=body, headers=auth_headers)
        assert response.status_code == 422

    def test_missing_field(self, vaults, auth_headers):
        body = {k: v for k, v in PROVISION_BODY.items() if k != "pad_left_int"}
        response = client.post("/provision", json=body, headers=auth_headers)
        assert response.status_code == 422

    def test_entropy_failure_returns_503(self, vaults, auth_headers, monkeypatch):
        def no_randomness(n):
            raise OSError("getrandom unavailable")

        monkeypatch.setattr("core.generator.secrets.token_bytes", no_randomness)
        response = client.post("/provision", json=PROVISION_BODY, headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["detail"] == "Secure random source unavailable"
        assert vaults["kv-prod"].writes == []

    def test_misconfigured_backend_returns_400(self, auth_headers):
        app.dependency_overrides[get_vault_opener] = lambda: (
            lambda name: open_vault(name, backend="tape")
        )
        try:
            response = client.post("/provision", json=PROVISION_BODY, headers=auth_headers)
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 400
        assert "tape" in response.json()["detail"]


class TestGenerateErrors:
    """Test error mapping on the generate endpoint."""

    def test_entropy_failure_returns_503(self, monkeypatch):
        def no_randomness(n):
            raise OSError("getrandom unavailable")

        monkeypatch.setattr("core.generator.secrets.token_bytes", no_randomness)
        response = client.post("/generate", json={"length": 16})

        assert response.status_code == 503
        assert response.json()["detail"] == "Secure random source unavailable"
        assert "getrandom" not in response.text


class TestRateLimiting:
    """Test that the rate limiter is enforced."""

    def test_limit_exceeded_returns_429(self, monkeypatch):
        monkeypatch.setattr(
            app.state, "limiter", Limiter(key_func=get_remote_address, default_limits=["2/minute"])
        )
        statuses = [client.post("/generate", json={}).status_code for _ in range(3)]
        assert statuses == [200, 200, 429]
