"""Provisioning endpoint.

Protected endpoint that runs one provisioning batch against a vault.
Passwords are written to the vault only and never returned.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import VaultOpener, get_current_client, get_vault_opener
from api.models import ProvisionItem, ProvisionRequest, ProvisionResponse
from core import (
    BatchSpec,
    EntropyError,
    ProvisioningOrchestrator,
    ValidationError,
    VaultError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Provisioning"])

# Generic error messages to prevent information disclosure
VAULT_UNAVAILABLE_MESSAGE = "Vault could not be read"
ENTROPY_UNAVAILABLE_MESSAGE = "Secure random source unavailable"


@router.post("/provision", response_model=ProvisionResponse)
def provision_batch(
    request: ProvisionRequest,
    client: str = Depends(get_current_client),
    open_vault: VaultOpener = Depends(get_vault_opener),
):
    """Create passwords for every VM in the batch that doesn't have one yet."""
    logger.info("Provision request from '%s' for vault '%s'", client, request.key_vault_name)

    batch = BatchSpec(
        vm_name_prefix=request.vm_name_prefix,
        environment_name=request.environment_name,
        index=request.index,
        number_of_instances=request.number_of_instances,
        pad_left_int=request.pad_left_int,
    )

    try:
        vault = open_vault(request.key_vault_name)
        report = ProvisioningOrchestrator(vault).provision(batch)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except VaultError as e:
        logger.error("Vault '%s' unavailable: %s", request.key_vault_name, e)
        raise HTTPException(status_code=502, detail=VAULT_UNAVAILABLE_MESSAGE)
    except EntropyError as e:
        logger.error("Entropy failure: %s", e)
        raise HTTPException(status_code=503, detail=ENTROPY_UNAVAILABLE_MESSAGE)

    data = report.to_dict()
    return ProvisionResponse(
        vault=data["vault"],
        items=[ProvisionItem(**item) for item in data["items"]],
        created=data["created"],
        skipped=data["skipped"],
        failed=data["failed"],
    )
