"""
Handles the low-level streaming of artifacts to disk with opt-in retries and
SHA-256 verification.
"""

import asyncio
import hashlib
import logging
import os
import time
from contextlib import suppress
from pathlib import Path
from typing import Callable

import aiofiles
import aiohttp

from winprov.api.client import CHECKSUM_HEADER, ArtifactoryClient
from winprov.exceptions import (
    ChecksumMismatchError,
    FetchError,
    LocalWriteError,
    RejectionKind,
    RemoteRejectedError,
    TransportError,
)
from winprov.models.result import FetchResult

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int | None], None]


def _is_retryable(error: FetchError) -> bool:
    if isinstance(error, TransportError):
        return True
    return (
        isinstance(error, RemoteRejectedError)
        and error.kind is RejectionKind.SERVER_ERROR
    )


def _discard(path: Path) -> None:
    with suppress(OSError, ValueError):
        path.unlink(missing_ok=True)


class Downloader:
    """
    Streams one artifact into a temporary sibling file and moves it over the
    destination once the body is complete.
    """

    def __init__(
        self,
        max_attempts: int = 1,
        base_delay: float = 1.5,
        chunk_size: int = 262144,
        verify_checksum: bool = True,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.chunk_size = chunk_size
        self.verify_checksum = verify_checksum

    async def download_file(
        self,
        client: ArtifactoryClient,
        artifact_path: str,
        destination_path: str | os.PathLike,
        on_progress: ProgressCallback | None = None,
    ) -> FetchResult:
        """
        Downloads an artifact, retrying transport and server errors when more than
        one attempt is allowed.

        Raises:
            FetchError: The last error once attempts are exhausted, or any
                non-retryable error immediately.
        """
        destination = Path(destination_path)
        start_time = time.monotonic()

        last_exception: FetchError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                written, digest = await self._attempt(
                    client, artifact_path, destination, on_progress
                )
            except FetchError as e:
                if not _is_retryable(e):
                    raise
                last_exception = e
                if attempt < self.max_attempts:
                    delay = self.base_delay * (2 ** (attempt - 1))
                    log.warning(
                        f"Fetch attempt {attempt}/{self.max_attempts} for "
                        f"'{artifact_path}' failed: {e}. Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                continue

            return FetchResult(
                path=destination,
                url=client.url_for(artifact_path),
                bytes_written=written,
                sha256=digest,
                duration_s=time.monotonic() - start_time,
                attempts=attempt,
            )

        raise last_exception

    async def _attempt(
        self,
        client: ArtifactoryClient,
        artifact_path: str,
        destination: Path,
        on_progress: ProgressCallback | None,
    ) -> tuple[int, str]:
        url = client.url_for(artifact_path)
        try:
            part_path = destination.with_name(destination.name + ".part")
        except ValueError as e:
            raise LocalWriteError(
                f"Invalid download target '{destination}': {e}"
            ) from e

        try:
            async with client.stream(artifact_path) as response:
                if not 200 <= response.status < 300:
                    raise RemoteRejectedError(response.status, url)

                total = response.content_length
                expected = response.headers.get(CHECKSUM_HEADER, "").strip().lower()
                digest = hashlib.sha256()
                written = 0

                try:
                    async with aiofiles.open(part_path, "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.chunk_size
                        ):
                            await f.write(chunk)
                            digest.update(chunk)
                            written += len(chunk)
                            if on_progress:
                                on_progress(written, total)
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    raise
                except (OSError, ValueError) as e:
                    raise LocalWriteError(
                        f"Could not write '{destination}': {e}"
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            _discard(part_path)
            raise TransportError(f"Request to '{url}' failed: {e!r}") from e
        except FetchError:
            _discard(part_path)
            raise

        actual = digest.hexdigest()
        if self.verify_checksum and expected and expected != actual:
            _discard(part_path)
            raise ChecksumMismatchError(
                f"SHA-256 mismatch for '{url}': expected {expected}, got {actual}."
            )

        try:
            await asyncio.to_thread(os.replace, part_path, destination)
        except (OSError, ValueError) as e:
            _discard(part_path)
            raise LocalWriteError(f"Could not replace '{destination}': {e}") from e

        log.debug(f"Wrote {written} bytes to '{destination}'.")
        return written, actual
