"""Pydantic models for API request/response validation.

Defines data structures for all API endpoints.
Name fields are restricted to characters that are valid in vault secret names.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.config import (
    DEFAULT_PASSWORD_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    VAULT_NAME_MAX_LENGTH,
    VAULT_NAME_MIN_LENGTH,
)
from core.errors import ValidationError
from core.vaults import validate_vault_name

# Letters, digits and hyphens only
NAME_ALLOWED_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-")


def validate_name_part(value: str) -> str:
    """Validate a VM name prefix or environment name.

    Raises:
        ValueError: If value contains characters a secret name cannot hold
    """
    if set(value) - NAME_ALLOWED_CHARS:
        # Don't reveal all invalid chars (could be used for probing)
        raise ValueError("Use only letters, numbers and hyphens.")
    return value


class CharacterSetModel(BaseModel):
    """One character class and its minimum count."""
    chars: str = Field(..., min_length=1, description="Allowed characters")
    min_count: int = Field(default=1, ge=0, description="Minimum characters from this set")


class PasswordGenerateRequest(BaseModel):
    """Request model for password generation.

    Omitting character_sets uses lowercase, uppercase, digits and symbols,
    one of each at minimum.
    """
    length: int = Field(
        default=DEFAULT_PASSWORD_LENGTH,
        ge=MIN_PASSWORD_LENGTH,
        le=MAX_PASSWORD_LENGTH,
        description="Password length",
    )
    character_sets: Optional[list[CharacterSetModel]] = Field(
        default=None, min_length=1, description="Character classes, in order"
    )


class PasswordGenerateResponse(BaseModel):
    """Response model for generated password."""
    password: str
    length: int


class ProvisionRequest(BaseModel):
    """Request model for a provisioning batch."""
    key_vault_name: str = Field(
        ..., min_length=VAULT_NAME_MIN_LENGTH, max_length=VAULT_NAME_MAX_LENGTH,
        description="Vault to store passwords in",
    )
    vm_name_prefix: str = Field(..., min_length=1, max_length=60, description="VM name prefix")
    environment_name: str = Field(..., min_length=1, max_length=40, description="Environment name")
    index: int = Field(..., ge=0, description="First VM sequence number")
    number_of_instances: int = Field(..., ge=0, le=1000, description="Number of VMs")
    pad_left_int: int = Field(..., ge=0, le=10, description="Zero-pad width")

    @field_validator("key_vault_name")
    @classmethod
    def validate_key_vault_name(cls, v: str) -> str:
        try:
            return validate_vault_name(v)
        except ValidationError as e:
            raise ValueError(str(e)) from e

    @field_validator("vm_name_prefix", "environment_name")
    @classmethod
    def validate_name_fields(cls, v: str) -> str:
        return validate_name_part(v)


class ProvisionItem(BaseModel):
    """Outcome for one secret name."""
    name: str
    outcome: str
    detail: str = ""


class ProvisionResponse(BaseModel):
    """Response model for a provisioning batch."""
    vault: str
    items: list[ProvisionItem]
    created: int
    skipped: int
    failed: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    vault_backend: str
