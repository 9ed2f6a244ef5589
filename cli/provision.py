"""Batch provisioning CLI flow.

Prints one status line per VM and a summary. Only setup-level failures
(invalid arguments, unreadable vault, no secure randomness) exit non-zero
by default; per-item failures do too when --fail-on-item-error is given.
"""

import argparse
import logging

from core import (
    BatchSpec,
    EntropyError,
    ProvisioningOrchestrator,
    ValidationError,
    VaultError,
    open_vault,
)
from core.config import FAIL_ON_ITEM_ERROR, MAX_WORKERS, VAULT_BACKEND, VAULT_DIR
from core.provisioning import EXIT_SETUP_FAILURE

from cli.prompts import prompt_master_password

logger = logging.getLogger(__name__)


def add_provision_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--key-vault-name", required=True, help="Vault to store passwords in")
    parser.add_argument("--vm-name-prefix", required=True, help="VM name prefix, e.g. 'vm'")
    parser.add_argument("--environment-name", required=True, help="Environment, e.g. 'prod'")
    parser.add_argument("--index", type=int, required=True, help="First VM sequence number")
    parser.add_argument("--number-of-instances", type=int, required=True,
                        help="Number of VMs in the batch")
    parser.add_argument("--pad-left-int", type=int, required=True,
                        help="Zero-pad width for the sequence number")
    parser.add_argument("--backend", choices=["file", "azure"], default=VAULT_BACKEND,
                        help=f"Vault backend (default: {VAULT_BACKEND})")
    parser.add_argument("--vault-dir", default=VAULT_DIR,
                        help=f"Directory for file vaults (default: {VAULT_DIR})")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS,
                        help=f"Items provisioned concurrently (default: {MAX_WORKERS})")
    parser.add_argument("--fail-on-item-error", action="store_true", default=FAIL_ON_ITEM_ERROR,
                        help="Exit non-zero if any single item fails")


def provision_command(args: argparse.Namespace) -> int:
    """Run one provisioning batch and print its report."""
    master_password = None
    if args.backend == "file":
        master_password = prompt_master_password()
        if master_password is None:
            print("Error: a master password is required for the file vault.")
            return EXIT_SETUP_FAILURE

    batch = BatchSpec(
        vm_name_prefix=args.vm_name_prefix,
        environment_name=args.environment_name,
        index=args.index,
        number_of_instances=args.number_of_instances,
        pad_left_int=args.pad_left_int,
    )

    try:
        vault = open_vault(
            args.key_vault_name,
            backend=args.backend,
            master_password=master_password,
            vault_dir=args.vault_dir,
        )
        report = ProvisioningOrchestrator(vault, max_workers=args.workers).provision(batch)
    except (ValidationError, VaultError, EntropyError) as e:
        logger.error("Provisioning aborted: %s", e)
        print(f"Error: {e}")
        return EXIT_SETUP_FAILURE

    for item in report.items:
        line = f"[{item.outcome.value}] {item.name}"
        if item.detail:
            line += f" - {item.detail}"
        print(line)
    print(report.summary())

    return report.exit_code(args.fail_on_item_error)
