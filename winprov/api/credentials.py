"""
Resolves the Artifactory API key and host from the environment, the managed
secret store, or explicit arguments.
"""

import logging
import os
from collections.abc import Mapping

from winprov.exceptions import SecretStoreError
from winprov.models.config import FetchConfig, ResolutionMode, ToolSettings

from .secret_store import SecretStore

log = logging.getLogger(__name__)

API_KEY_ENV = "ARTIFACTORY_API_KEY"
HOST_ENV = "ARTIFACTORY_HOST"


def _resolve_value(
    label: str,
    env_name: str,
    environ: Mapping[str, str],
    mode: ResolutionMode,
    secret_store: SecretStore | None,
    parameter: str,
    decrypt: bool,
    explicit: str | None,
) -> str:
    env_value = environ.get(env_name) or ""
    if env_value.strip():
        log.debug(f"Using {label} from environment variable {env_name}.")
        return env_value

    if mode is ResolutionMode.SECRET_STORE:
        if secret_store is None:
            raise SecretStoreError(
                "Secret store mode was selected but no secret store is available."
            )
        log.debug(f"Reading {label} from secret store entry '{parameter}'.")
        return secret_store.get(parameter, decrypt=decrypt)

    return explicit or ""


def resolve_fetch_config(
    mode: ResolutionMode = ResolutionMode.DIRECT,
    explicit_api_key: str | None = None,
    explicit_host: str | None = None,
    *,
    secret_store: SecretStore | None = None,
    environ: Mapping[str, str] | None = None,
    settings: ToolSettings | None = None,
) -> FetchConfig:
    """
    Builds a FetchConfig using the precedence: environment, then secret store
    (when selected), then explicit arguments. Each value is resolved on its own,
    so the environment may override only one of them.

    Empty results are returned as-is; `fetch` refuses to run with them.

    Args:
        mode: DIRECT uses the explicit arguments, SECRET_STORE reads named entries.
        explicit_api_key: API key supplied by the caller.
        explicit_host: Base URL supplied by the caller.
        secret_store: Store consulted in SECRET_STORE mode.
        environ: Environment mapping; defaults to os.environ.
        settings: Supplies the secret entry names.

    Returns:
        The resolved FetchConfig.
    """
    environ = os.environ if environ is None else environ
    settings = settings or ToolSettings()

    api_key = _resolve_value(
        "API key",
        API_KEY_ENV,
        environ,
        mode,
        secret_store,
        settings.api_key_parameter,
        True,
        explicit_api_key,
    )
    host = _resolve_value(
        "host",
        HOST_ENV,
        environ,
        mode,
        secret_store,
        settings.host_parameter,
        False,
        explicit_host,
    )
    return FetchConfig(api_key=api_key, host=host)
