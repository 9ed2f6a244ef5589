"""Centralized file I/O operations.

Provides consistent JSON and binary file handling with proper error management.
Vault and salt files are written owner-only on Unix systems.
"""

import json
import os
import stat
import sys
from typing import Optional

from core.errors import ProvisionerError


# Secure file permission: owner read/write only (0600 in octal)
SECURE_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


class StorageError(ProvisionerError):
    """Base exception for storage operations."""
    pass


class FileCorruptedError(StorageError):
    """File exists but contains invalid data."""
    pass


def _set_secure_permissions(filepath: str) -> None:
    """Set restrictive file permissions on sensitive files.

    On Unix systems: Sets file to mode 0600 (owner read/write only)
    On Windows: No-op (Windows uses ACLs, not Unix permissions)
    """
    if sys.platform == "win32":
        return

    try:
        os.chmod(filepath, SECURE_FILE_MODE)
    except OSError:
        # Best effort - don't fail if we can't set permissions
        pass


def ensure_directory(directory: str) -> None:
    """Create a directory if it doesn't exist.

    On Unix systems, directories are created with mode 0700 (owner only).
    """
    if not directory:
        return
    if sys.platform != "win32":
        os.makedirs(directory, mode=0o700, exist_ok=True)
    else:
        os.makedirs(directory, exist_ok=True)


def load_json(filepath: str) -> Optional[dict]:
    """Load JSON data from file.

    Args:
        filepath: Path to JSON file

    Returns:
        Parsed JSON data as dict, or None if file doesn't exist

    Raises:
        FileCorruptedError: If file exists but contains invalid JSON
    """
    if not os.path.exists(filepath):
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise FileCorruptedError(f"Invalid JSON in {filepath}: {e}") from e
    except OSError as e:
        raise StorageError(f"Failed to read {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise FileCorruptedError(f"Expected a JSON object in {filepath}")
    return data


def save_json(filepath: str, data: dict, indent: int = 2) -> None:
    """Save data to a JSON file with owner-only permissions.

    The file is written to a temporary sibling first and moved into place,
    so readers never observe a half-written vault.

    Raises:
        StorageError: If write operation fails
    """
    tmp_path = f"{filepath}.tmp"
    try:
        ensure_directory(os.path.dirname(filepath))
        # Created owner-only so the ciphertext is never world-readable
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_MODE)
        with open(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent)
        _set_secure_permissions(tmp_path)
        os.replace(tmp_path, filepath)
    except OSError as e:
        raise StorageError(f"Failed to write {filepath}: {e}") from e


def load_binary(filepath: str) -> Optional[bytes]:
    """Load binary data from file.

    Returns:
        Binary data, or None if file doesn't exist
    """
    if not os.path.exists(filepath):
        return None

    try:
        with open(filepath, "rb") as f:
            return f.read()
    except OSError as e:
        raise StorageError(f"Failed to read {filepath}: {e}") from e


def save_binary(filepath: str, data: bytes) -> None:
    """Save binary data to file with owner-only permissions."""
    try:
        ensure_directory(os.path.dirname(filepath))
        with open(filepath, "wb") as f:
            f.write(data)
        _set_secure_permissions(filepath)
    except OSError as e:
        raise StorageError(f"Failed to write {filepath}: {e}") from e
