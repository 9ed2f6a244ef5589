"""Idempotent batch provisioning of VM passwords.

For a batch of VMs, derives each VM's secret name, lists the vault once,
and generates and stores a password for every name the vault does not
already hold. Existing secrets are never touched. A failure to store one
item is recorded in the report and the batch carries on; re-running the
batch is the retry mechanism.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from core.activity_log import log_status_event
from core.config import MAX_WORKERS
from core.errors import EntropyError, ValidationError, VaultError
from core.generator import EntropySource, GenerationSpec, try_generate_password
from core.naming import VMIdentity, derive_identities
from core.vaults import SecretVault

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SETUP_FAILURE = 1
EXIT_ITEM_FAILURE = 3

ALREADY_EXISTS = "already exists"


class Outcome(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchSpec:
    """The VMs to provision passwords for."""
    vm_name_prefix: str
    environment_name: str
    index: int
    number_of_instances: int
    pad_left_int: int

    def identities(self) -> list[VMIdentity]:
        return derive_identities(
            self.vm_name_prefix,
            self.environment_name,
            self.index,
            self.number_of_instances,
            self.pad_left_int,
        )


@dataclass(frozen=True)
class ItemResult:
    name: str
    outcome: Outcome
    detail: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "outcome": self.outcome.value, "detail": self.detail}


@dataclass
class ProvisioningReport:
    """Per-item outcomes of one run, in derivation order."""
    vault_name: str
    items: list[ItemResult] = field(default_factory=list)

    def _with_outcome(self, outcome: Outcome) -> list[ItemResult]:
        return [item for item in self.items if item.outcome is outcome]

    @property
    def created(self) -> list[ItemResult]:
        return self._with_outcome(Outcome.CREATED)

    @property
    def skipped(self) -> list[ItemResult]:
        return self._with_outcome(Outcome.SKIPPED)

    @property
    def failed(self) -> list[ItemResult]:
        return self._with_outcome(Outcome.FAILED)

    @property
    def has_failures(self) -> bool:
        return any(item.outcome is Outcome.FAILED for item in self.items)

    def summary(self) -> str:
        return (
            f"{len(self.items)} secrets in '{self.vault_name}': "
            f"{len(self.created)} created, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed"
        )

    def exit_code(self, fail_on_item_error: bool = False) -> int:
        """Process exit status for this report.

        Per-item failures only change the status when fail_on_item_error is set.
        """
        if fail_on_item_error and self.has_failures:
            return EXIT_ITEM_FAILURE
        return EXIT_OK

    def to_dict(self) -> dict:
        return {
            "vault": self.vault_name,
            "items": [item.to_dict() for item in self.items],
            "created": len(self.created),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }


class ProvisioningOrchestrator:
    """Provision missing VM passwords into one vault.

    Args:
        vault: Vault client the secrets are listed from and written to
        spec: Password constraints (default: GenerationSpec.default())
        entropy_source: Seed byte source passed to the generator
        max_workers: Items processed concurrently; 1 means sequential
    """

    def __init__(
        self,
        vault: SecretVault,
        spec: Optional[GenerationSpec] = None,
        entropy_source: Optional[EntropySource] = None,
        max_workers: int = MAX_WORKERS,
    ):
        if max_workers < 1:
            raise ValidationError(f"max_workers must be at least 1, got {max_workers}.")
        self.vault = vault
        self.spec = spec or GenerationSpec.default()
        self.entropy_source = entropy_source
        self.max_workers = max_workers

    def _existing_names(self) -> set[str]:
        try:
            names = self.vault.list_secrets()
        except VaultError as e:
            log_status_event("secret_listing", "FAILED", self.vault.name, {"error": str(e)})
            raise
        except TimeoutError as e:
            log_status_event("secret_listing", "FAILED", self.vault.name, {"error": "timeout"})
            raise VaultError(f"Listing secrets in '{self.vault.name}' timed out") from e
        # Vault secret names are case-insensitive
        return {name.upper() for name in names}

    def _record(self, result: ItemResult) -> ItemResult:
        if result.outcome is Outcome.FAILED:
            logger.error("[%s] %s: %s", result.outcome.value, result.name, result.detail)
        else:
            logger.info("[%s] %s", result.outcome.value, result.name)
        details = {"secret_name": result.name}
        if result.detail:
            details["detail"] = result.detail
        log_status_event("secret_provisioned", result.outcome.name, self.vault.name, details)
        return result

    def _provision_item(self, name: str) -> ItemResult:
        """Generate and store one password.

        Raises:
            EntropyError: No password can be generated safely, so the run stops
        """
        generated = try_generate_password(self.spec, self.entropy_source)
        if isinstance(generated.error, EntropyError):
            raise generated.error
        if not generated.ok:
            return self._record(ItemResult(name, Outcome.FAILED, str(generated.error)))

        try:
            self.vault.set_secret(name, generated.password)
        except (VaultError, TimeoutError) as e:
            return self._record(ItemResult(name, Outcome.FAILED, str(e) or type(e).__name__))

        return self._record(ItemResult(name, Outcome.CREATED))

    def provision(self, batch: BatchSpec) -> ProvisioningReport:
        """Provision every missing secret in the batch.

        Returns:
            Report with exactly one entry per derived name, in derivation order

        Raises:
            ValidationError: If the batch or generation spec is malformed
            VaultError: If the vault cannot be listed
            EntropyError: If the secure random source fails
        """
        self.spec.validate()
        names = [identity.secret_name for identity in batch.identities()]
        logger.info(
            "Provisioning %d secrets in '%s' (%d workers)",
            len(names), self.vault.name, self.max_workers,
        )

        existing = self._existing_names()

        outcomes: dict[str, ItemResult] = {}
        pending = []
        for name in names:
            if name.upper() in existing:
                outcomes[name] = self._record(ItemResult(name, Outcome.SKIPPED, ALREADY_EXISTS))
            else:
                pending.append(name)

        if self.max_workers == 1 or len(pending) <= 1:
            for name in pending:
                outcomes[name] = self._provision_item(name)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # map yields in submission order and re-raises worker errors
                try:
                    for name, result in zip(pending, executor.map(self._provision_item, pending)):
                        outcomes[name] = result
                except EntropyError:
                    # Queued items must not write once the run is aborted
                    executor.shutdown(cancel_futures=True)
                    raise

        report = ProvisioningReport(self.vault.name, [outcomes[name] for name in names])
        logger.info(report.summary())
        return report


def provision(vault: SecretVault, batch: BatchSpec, **kwargs) -> ProvisioningReport:
    """Provision a batch with a one-off orchestrator.

    Keyword arguments are passed to ProvisioningOrchestrator.
    """
    return ProvisioningOrchestrator(vault, **kwargs).provision(batch)
