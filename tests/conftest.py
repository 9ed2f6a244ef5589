"""Shared fixtures for the provisioner test suite."""

import os

import pytest

from core import BatchSpec, MemoryVault, VaultError


class FailingVault(MemoryVault):
    """MemoryVault whose writes fail for chosen names, and optionally whose listing fails."""

    def __init__(self, fail_names=(), fail_listing=None, **kwargs):
        super().__init__(**kwargs)
        self.fail_names = set(fail_names)
        self.fail_listing = fail_listing
        self.list_calls = 0

    def list_secrets(self):
        self.list_calls += 1
        if self.fail_listing is not None:
            raise self.fail_listing
        return super().list_secrets()

    def set_secret(self, name, value):
        if name in self.fail_names:
            raise VaultError(f"write rejected for {name}")
        super().set_secret(name, value)


@pytest.fixture
def memory_vault():
    return MemoryVault(name="kv-test")


@pytest.fixture
def failing_vault_factory():
    return FailingVault


@pytest.fixture
def batch():
    """Five VMs: VM001-PROD-PASSWORD .. VM005-PROD-PASSWORD."""
    return BatchSpec(
        vm_name_prefix="vm",
        environment_name="prod",
        index=1,
        number_of_instances=5,
        pad_left_int=3,
    )


@pytest.fixture
def fixed_entropy():
    """Entropy source that always returns the same bytes."""
    return lambda n: bytes(range(n))


@pytest.fixture
def jwt_secret(monkeypatch):
    from core import config
    secret = os.urandom(32).hex()
    monkeypatch.setattr(config, "JWT_SECRET_KEY", secret)
    return secret
