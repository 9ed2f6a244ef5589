"""Deterministic secret names for provisioned VMs.

The secret name is the join key between a provisioning run and the vault,
so it must come out identically on every run for the same inputs.
"""

from dataclasses import dataclass

from core.errors import ValidationError


def secret_name(
    prefix: str,
    sequence_number: int,
    zero_pad_width: int,
    environment_name: str,
) -> str:
    """Build the vault secret name for one VM.

    Example:
        >>> secret_name("vm", 3, 3, "prod")
        'VM003-PROD-PASSWORD'
    """
    padded = str(sequence_number).zfill(zero_pad_width)
    return f"{prefix}{padded}-{environment_name}-password".upper()


@dataclass(frozen=True)
class VMIdentity:
    """One VM in a provisioning batch."""
    prefix: str
    sequence_number: int
    zero_pad_width: int
    environment_name: str

    @property
    def vm_name(self) -> str:
        return f"{self.prefix}{str(self.sequence_number).zfill(self.zero_pad_width)}"

    @property
    def secret_name(self) -> str:
        return secret_name(
            self.prefix, self.sequence_number, self.zero_pad_width, self.environment_name
        )


def derive_identities(
    prefix: str,
    environment_name: str,
    start_index: int,
    count: int,
    pad_width: int,
) -> list[VMIdentity]:
    """Identities for sequence numbers start_index .. start_index+count-1.

    Raises:
        ValidationError: If start_index, count or pad_width is negative
    """
    if start_index < 0:
        raise ValidationError(f"Starting index cannot be negative, got {start_index}.")
    if count < 0:
        raise ValidationError(f"Number of instances cannot be negative, got {count}.")
    if pad_width < 0:
        raise ValidationError(f"Zero-pad width cannot be negative, got {pad_width}.")

    return [
        VMIdentity(prefix, sequence_number, pad_width, environment_name)
        for sequence_number in range(start_index, start_index + count)
    ]
