"""Azure Key Vault backend.

Authenticates with DefaultAzureCredential, so environment credentials,
managed identity and an `az login` session all work without configuration.
"""

import logging
from typing import Any, Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from core.config import AZURE_VAULT_URL_TEMPLATE, VAULT_TIMEOUT_SECONDS
from core.errors import VaultError
from core.vaults import validate_vault_name

logger = logging.getLogger(__name__)


def vault_url(name: str) -> str:
    return AZURE_VAULT_URL_TEMPLATE.format(name=name)


class AzureKeyVault:
    """SecretVault backed by an Azure Key Vault."""

    def __init__(
        self,
        name: str,
        credential: Optional[Any] = None,
        client: Optional[SecretClient] = None,
        timeout: int = VAULT_TIMEOUT_SECONDS,
    ):
        self.name = validate_vault_name(name)
        if client is None:
            client = SecretClient(
                vault_url=vault_url(name),
                credential=credential or DefaultAzureCredential(),
                connection_timeout=timeout,
                read_timeout=timeout,
            )
        self._client = client

    def list_secrets(self) -> set[str]:
        try:
            return {props.name for props in self._client.list_properties_of_secrets()}
        except AzureError as e:
            raise VaultError(f"Cannot list secrets in key vault '{self.name}': {e}") from e

    def get_secret(self, name: str) -> Optional[str]:
        try:
            return self._client.get_secret(name).value
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise VaultError(f"Cannot read secret '{name}' from key vault '{self.name}': {e}") from e

    def set_secret(self, name: str, value: str) -> None:
        try:
            self._client.set_secret(name, value)
        except AzureError as e:
            raise VaultError(f"Cannot store secret '{name}' in key vault '{self.name}': {e}") from e
        logger.debug("Stored secret '%s' in key vault '%s'", name, self.name)
