"""Secret vault backends.

The provisioner only needs three operations from a vault: list the names
of stored secrets, read one, and store one. Every backend raises
VaultError for any failure so callers handle a single exception type.
"""

import logging
import os
import re
import threading
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from cryptography.fernet import Fernet

from core.config import (
    PBKDF2_ITERATIONS,
    VAULT_BACKEND,
    VAULT_DIR,
    VAULT_NAME_MAX_LENGTH,
    VAULT_NAME_MIN_LENGTH,
)
from core.crypto import InvalidToken, build_fernet, decrypt, encrypt
from core.errors import ValidationError, VaultError
from core.storage import StorageError, load_json, save_json

logger = logging.getLogger(__name__)

# Letters, digits and hyphens, starting with a letter
_VAULT_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")

# Plaintext encrypted into every file vault to detect a wrong master password
_KEY_CHECK_PLAINTEXT = "vault-key-check"


@runtime_checkable
class SecretVault(Protocol):
    """Key-value store for secrets, addressed by name."""

    name: str

    def list_secrets(self) -> set[str]:
        ...

    def get_secret(self, name: str) -> Optional[str]:
        ...

    def set_secret(self, name: str, value: str) -> None:
        ...


def validate_vault_name(name: str) -> str:
    """Validate a key vault name.

    Follows Azure Key Vault rules: 3-24 characters, letters, digits and
    hyphens, starting with a letter. The same rules keep file vault names
    safe to use as file names.

    Raises:
        ValidationError: If the name is not acceptable
    """
    if not VAULT_NAME_MIN_LENGTH <= len(name) <= VAULT_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Key vault name must be {VAULT_NAME_MIN_LENGTH}-{VAULT_NAME_MAX_LENGTH} "
            f"characters, got {len(name)}."
        )
    if not _VAULT_NAME_PATTERN.match(name) or "--" in name or name.endswith("-"):
        raise ValidationError(
            "Key vault name may only contain letters, digits and single hyphens, "
            "and must start with a letter."
        )
    return name


class MemoryVault:
    """Thread-safe in-process vault."""

    def __init__(self, name: str = "memory", secrets: Optional[dict[str, str]] = None):
        self.name = name
        self._secrets = dict(secrets or {})
        self._lock = threading.Lock()
        self.writes: list[str] = []

    def list_secrets(self) -> set[str]:
        with self._lock:
            return set(self._secrets)

    def get_secret(self, name: str) -> Optional[str]:
        with self._lock:
            return self._secrets.get(name)

    def set_secret(self, name: str, value: str) -> None:
        with self._lock:
            self._secrets[name] = value
            self.writes.append(name)


class EncryptedFileVault:
    """Vault stored as a JSON file of Fernet-encrypted values.

    File layout::

        {
            "key_check": "<token>",
            "secrets": {"NAME": {"value": "<token>", "created": "<iso>"}}
        }
    """

    def __init__(self, name: str, path: str, fernet: Fernet):
        self.name = name
        self.path = path
        self._fernet = fernet
        self._lock = threading.Lock()
        self._verify_key()

    @classmethod
    def open(
        cls,
        name: str,
        master_password: str,
        vault_dir: str = VAULT_DIR,
        iterations: int = PBKDF2_ITERATIONS,
    ) -> "EncryptedFileVault":
        """Open (or create on first write) the vault file for a key vault name.

        Raises:
            ValidationError: If the vault name is invalid
            VaultError: If the salt cannot be read or the password is wrong
        """
        validate_vault_name(name)
        if not master_password:
            raise VaultError("A master password is required for the file vault.")

        path = os.path.join(vault_dir, f"{name}.vault.json")
        salt_file = os.path.join(vault_dir, f"{name}.salt")
        try:
            fernet = build_fernet(master_password, salt_file, iterations)
        except StorageError as e:
            raise VaultError(f"Cannot prepare key for vault '{name}': {e}") from e
        return cls(name, path, fernet)

    def _load(self) -> dict:
        try:
            data = load_json(self.path)
        except StorageError as e:
            raise VaultError(f"Cannot read vault '{self.name}': {e}") from e
        return data or {"secrets": {}}

    def _save(self, data: dict) -> None:
        try:
            save_json(self.path, data)
        except StorageError as e:
            raise VaultError(f"Cannot write vault '{self.name}': {e}") from e

    def _verify_key(self) -> None:
        key_check = self._load().get("key_check")
        if key_check is None:
            return
        try:
            decrypt(self._fernet, key_check)
        except InvalidToken as e:
            raise VaultError(f"Master password does not match vault '{self.name}'.") from e

    def list_secrets(self) -> set[str]:
        with self._lock:
            return set(self._load().get("secrets", {}))

    def get_secret(self, name: str) -> Optional[str]:
        with self._lock:
            entry = self._load().get("secrets", {}).get(name)
        if entry is None:
            return None
        try:
            return decrypt(self._fernet, entry["value"])
        except (InvalidToken, KeyError) as e:
            raise VaultError(f"Secret '{name}' in vault '{self.name}' is unreadable.") from e

    def set_secret(self, name: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data.setdefault("key_check", encrypt(self._fernet, _KEY_CHECK_PLAINTEXT))
            data.setdefault("secrets", {})[name] = {
                "value": encrypt(self._fernet, value),
                "created": datetime.now().isoformat(),
            }
            self._save(data)


def open_vault(
    key_vault_name: str,
    backend: Optional[str] = None,
    master_password: Optional[str] = None,
    vault_dir: Optional[str] = None,
) -> SecretVault:
    """Open the vault named key_vault_name on the configured backend.

    Args:
        key_vault_name: Vault name (Azure Key Vault name or file vault name)
        backend: "file" or "azure" (default: VAULT_BACKEND)
        master_password: Required for the file backend
        vault_dir: Directory for file vaults (default: VAULT_DIR)

    Raises:
        ValidationError: Unknown backend or invalid vault name
        VaultError: If the vault cannot be opened
    """
    backend = (backend or VAULT_BACKEND).lower()
    logger.debug("Opening %s vault '%s'", backend, key_vault_name)

    if backend == "file":
        return EncryptedFileVault.open(
            key_vault_name, master_password or "", vault_dir or VAULT_DIR
        )
    if backend == "azure":
        from core.azure_vault import AzureKeyVault
        return AzureKeyVault(key_vault_name)

    raise ValidationError(f"Unknown vault backend '{backend}'. Use 'file' or 'azure'.")
