"""
Artifact fetch operations: the credential check, the client and the
downloader wired together.
"""

import asyncio
import logging
import os
from collections.abc import Mapping

import aiohttp

from winprov.api.client import ArtifactoryClient
from winprov.api.credentials import resolve_fetch_config
from winprov.api.secret_store import SecretStore
from winprov.models.config import FetchConfig, ResolutionMode, ToolSettings
from winprov.models.result import FetchResult
from winprov.transfer.downloader import Downloader, ProgressCallback

log = logging.getLogger(__name__)


async def fetch(
    artifact_path: str,
    output_path: str | os.PathLike,
    config: FetchConfig,
    *,
    settings: ToolSettings | None = None,
    session: aiohttp.ClientSession | None = None,
    on_progress: ProgressCallback | None = None,
) -> FetchResult:
    """
    Downloads `config.host + artifact_path` to `output_path`.

    Args:
        artifact_path: Path within the repository, beginning with '/'.
        output_path: Local file to create or overwrite.
        config: Resolved API key and host.
        settings: Timeout, retry and checksum options.
        session: An existing aiohttp session to reuse. It is not closed here.
        on_progress: Called with (bytes_so_far, total_or_None) per chunk.

    Raises:
        MissingConfigurationError: Before any request, if the key or host is empty.
        InsecureEndpointError: Before any request, if the host is not https.
        TransportError, RemoteRejectedError, LocalWriteError, ChecksumMismatchError
    """
    config.ensure_complete()
    settings = settings or ToolSettings()

    downloader = Downloader(
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_delay,
        chunk_size=settings.chunk_size,
        verify_checksum=settings.verify_checksum,
    )
    async with ArtifactoryClient(
        config,
        timeout=settings.timeout,
        session=session,
        ca_bundle=settings.ca_bundle or None,
    ) as client:
        log.info(f"Fetching '{artifact_path}' from {config.host}")
        result = await downloader.download_file(
            client, artifact_path, output_path, on_progress=on_progress
        )

    log.info(f"Saved '{result.path}' ({result.bytes_written} bytes).")
    return result


async def fetch_artifact(
    artifact_path: str,
    output_path: str | os.PathLike,
    mode: ResolutionMode = ResolutionMode.DIRECT,
    explicit_api_key: str | None = None,
    explicit_host: str | None = None,
    *,
    secret_store: SecretStore | None = None,
    environ: Mapping[str, str] | None = None,
    settings: ToolSettings | None = None,
    session: aiohttp.ClientSession | None = None,
    on_progress: ProgressCallback | None = None,
) -> FetchResult:
    """Resolves the API key and host, then fetches the artifact."""
    settings = settings or ToolSettings()
    config = await asyncio.to_thread(
        resolve_fetch_config,
        mode,
        explicit_api_key,
        explicit_host,
        secret_store=secret_store,
        environ=environ,
        settings=settings,
    )
    return await fetch(
        artifact_path,
        output_path,
        config,
        settings=settings,
        session=session,
        on_progress=on_progress,
    )
