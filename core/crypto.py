"""Cryptographic operations for the file-backed vault.

Handles encryption key derivation and Fernet cipher construction.
Uses PBKDF2 with SHA-256 per OWASP 2023 recommendations.
"""

import base64
import os

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.config import PBKDF2_ITERATIONS
from core.storage import load_binary, save_binary

SALT_BYTES = 16


def derive_key(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    """Derive a Fernet-compatible key from password using PBKDF2.

    Args:
        password: Master password
        salt: Random salt for key derivation
        iterations: PBKDF2 iteration count

    Returns:
        Base64-encoded 32-byte key suitable for Fernet
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode()))


def get_or_create_salt(salt_file: str) -> bytes:
    """Get existing salt or create a new one for key derivation.

    Args:
        salt_file: Path of the salt file belonging to one vault

    Returns:
        16-byte salt for PBKDF2
    """
    existing_salt = load_binary(salt_file)
    if existing_salt is not None:
        return existing_salt

    salt = os.urandom(SALT_BYTES)
    save_binary(salt_file, salt)
    return salt


def build_fernet(password: str, salt_file: str, iterations: int = PBKDF2_ITERATIONS) -> Fernet:
    """Build a Fernet cipher keyed from the master password and vault salt."""
    salt = get_or_create_salt(salt_file)
    return Fernet(derive_key(password, salt, iterations))


def encrypt(fernet: Fernet, plaintext: str) -> str:
    """Encrypt a string, returning URL-safe base64 text."""
    return fernet.encrypt(plaintext.encode()).decode()


def decrypt(fernet: Fernet, ciphertext: str) -> str:
    """Decrypt a string produced by encrypt().

    Raises:
        cryptography.fernet.InvalidToken: If the key is wrong or data was tampered with
    """
    return fernet.decrypt(ciphertext.encode()).decode()


__all__ = [
    "InvalidToken",
    "build_fernet",
    "decrypt",
    "derive_key",
    "encrypt",
    "get_or_create_salt",
]
