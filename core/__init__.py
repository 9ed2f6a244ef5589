"""VM Password Provisioner Core Package.

Provides modular components for provisioning VM passwords into a vault:
- config: Centralized configuration constants
- errors: Exception hierarchy
- generator: Constrained random password generation
- naming: Deterministic secret names
- provisioning: Idempotent batch orchestration
- vaults: Secret vault backends
- activity_log: Log and status event configuration
- jwt_auth: API access tokens
"""

# Configuration constants
from core.config import (
    MIN_PASSWORD_LENGTH,
    MAX_PASSWORD_LENGTH,
    DEFAULT_PASSWORD_LENGTH,
    VAULT_BACKEND,
    VAULT_DIR,
    MAX_WORKERS,
    FAIL_ON_ITEM_ERROR,
)

# Errors
from core.errors import (
    ProvisionerError,
    ValidationError,
    EntropyError,
    VaultError,
)

# Password generation
from core.generator import (
    CharacterSet,
    GenerationSpec,
    GenerationResult,
    fisher_yates_shuffle,
    generate_password,
    seed_random,
    try_generate_password,
)

# Naming
from core.naming import VMIdentity, derive_identities, secret_name

# Vaults
from core.vaults import (
    SecretVault,
    MemoryVault,
    EncryptedFileVault,
    open_vault,
    validate_vault_name,
)

# Provisioning
from core.provisioning import (
    BatchSpec,
    ItemResult,
    Outcome,
    ProvisioningOrchestrator,
    ProvisioningReport,
    provision,
)

# Logging
from core.activity_log import configure_logging, log_status_event

__all__ = [
    # Config
    "MIN_PASSWORD_LENGTH",
    "MAX_PASSWORD_LENGTH",
    "DEFAULT_PASSWORD_LENGTH",
    "VAULT_BACKEND",
    "VAULT_DIR",
    "MAX_WORKERS",
    "FAIL_ON_ITEM_ERROR",
    # Errors
    "ProvisionerError",
    "ValidationError",
    "EntropyError",
    "VaultError",
    # Generator
    "CharacterSet",
    "GenerationSpec",
    "GenerationResult",
    "fisher_yates_shuffle",
    "generate_password",
    "seed_random",
    "try_generate_password",
    # Naming
    "VMIdentity",
    "derive_identities",
    "secret_name",
    # Vaults
    "SecretVault",
    "MemoryVault",
    "EncryptedFileVault",
    "open_vault",
    "validate_vault_name",
    # Provisioning
    "BatchSpec",
    "ItemResult",
    "Outcome",
    "ProvisioningOrchestrator",
    "ProvisioningReport",
    "provision",
    # Logging
    "configure_logging",
    "log_status_event",
]
