"""Centralized configuration constants.

All configurable values in one place for easy maintenance.
Deployment-specific settings can be overridden via environment variables.
"""

import os
import string

# Password generation
MIN_PASSWORD_LENGTH = int(os.environ.get("MIN_PASSWORD_LENGTH", "8"))
MAX_PASSWORD_LENGTH = int(os.environ.get("MAX_PASSWORD_LENGTH", "255"))
DEFAULT_PASSWORD_LENGTH = 12
DEFAULT_MIN_COUNT = 1

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = string.punctuation

# Bytes read from the OS CSPRNG to seed each generator instance
SEED_BYTES = 32

# Vault backends
# "file" stores Fernet-encrypted secrets on disk, "azure" talks to Azure Key Vault
VAULT_BACKEND = os.environ.get("VAULT_BACKEND", "file").lower()
VAULT_DIR = os.environ.get("VAULT_DIR", "vaults")
PBKDF2_ITERATIONS = 600_000  # OWASP 2023 for SHA-256
AZURE_VAULT_URL_TEMPLATE = os.environ.get(
    "AZURE_VAULT_URL_TEMPLATE", "https://{name}.vault.azure.net"
)
VAULT_TIMEOUT_SECONDS = int(os.environ.get("VAULT_TIMEOUT_SECONDS", "30"))

# Azure Key Vault naming rules, reused for file vault names
VAULT_NAME_MIN_LENGTH = 3
VAULT_NAME_MAX_LENGTH = 24

# Provisioning
MAX_WORKERS = int(os.environ.get("MAX_WORKERS", "1"))
# Per-item failures do not change the exit status unless this is enabled
FAIL_ON_ITEM_ERROR = os.environ.get("FAIL_ON_ITEM_ERROR", "false").lower() == "true"

# Logging
LOG_DIR = os.environ.get("LOG_DIR", "logs")
PROVISION_LOG_NAME = "provision.log"
EVENT_LOG_NAME = "provision_events.jsonl"
LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB default
LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", 5))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# HTTPS enforcement
# Set REQUIRE_HTTPS=true in production to reject non-HTTPS requests
REQUIRE_HTTPS = os.environ.get("REQUIRE_HTTPS", "false").lower() == "true"

API_RATE_LIMIT = os.environ.get("API_RATE_LIMIT", "100/minute")

# JWT Configuration
# SECURITY: In production, set JWT_SECRET_KEY via environment variable
# Generate with: python -c "import secrets; print(secrets.token_hex(32))"
JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", None)
JWT_ALGORITHM = "HS256"
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
