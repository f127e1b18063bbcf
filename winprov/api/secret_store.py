"""
Managed secret store access.

The fetcher never talks to a secret service directly; it receives an object
implementing `SecretStore`. `ParameterStore` is the production implementation,
backed by AWS Systems Manager Parameter Store.
"""

import logging
from typing import Any, Protocol

from winprov.exceptions import SecretStoreError

log = logging.getLogger(__name__)


class SecretStore(Protocol):
    def get(self, name: str, decrypt: bool) -> str:
        """Returns the value stored under `name`, raising SecretStoreError."""


class ParameterStore:
    """Reads named parameters from AWS SSM Parameter Store."""

    def __init__(self, region: str | None = None, client: Any = None):
        """
        Args:
            region: AWS region for the SSM client. Falls back to the boto3 default
                chain when empty.
            client: A pre-built SSM client. Created lazily when omitted.
        """
        self.region = region or None
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            import boto3

            self._client = boto3.client("ssm", region_name=self.region)
        return self._client

    def get(self, name: str, decrypt: bool) -> str:
        from botocore.exceptions import BotoCoreError, ClientError

        log.debug(f"Reading parameter '{name}' (decrypt={decrypt}).")
        try:
            response = self._get_client().get_parameter(
                Name=name, WithDecryption=decrypt
            )
        except (BotoCoreError, ClientError) as e:
            raise SecretStoreError(f"Could not read parameter '{name}': {e}") from e

        try:
            return response["Parameter"]["Value"]
        except (KeyError, TypeError) as e:
            raise SecretStoreError(
                f"Parameter store returned no value for '{name}'."
            ) from e
