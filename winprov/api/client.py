"""
Artifactory HTTP client: URL construction, authentication headers and a
TLS 1.2 transport.
"""

import logging
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
from yarl import URL

from winprov.exceptions import TransportError
from winprov.models.config import FetchConfig

log = logging.getLogger(__name__)

API_KEY_HEADER = "X-JFrog-Art-Api"
CHECKSUM_HEADER = "X-Checksum-Sha256"


def build_url(host: str, artifact_path: str) -> str:
    """Concatenates the host and artifact path exactly as given."""
    return host + artifact_path


def build_headers(config: FetchConfig) -> dict[str, str]:
    return {
        API_KEY_HEADER: config.api_key.get_secret_value(),
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def create_tls12_context(cafile: str | None = None) -> ssl.SSLContext:
    """
    Creates a verifying SSL context that only negotiates TLS 1.2.

    Args:
        cafile: PEM bundle trusted in addition to the system store.
    """
    context = ssl.create_default_context()
    if cafile:
        context.load_verify_locations(cafile=cafile)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.maximum_version = ssl.TLSVersion.TLSv1_2
    return context


class ArtifactoryClient:
    """
    Async client for authenticated GETs against an Artifactory host.

    The session is created on first use unless one is supplied, in which case
    the caller keeps ownership of it.
    """

    def __init__(
        self,
        config: FetchConfig,
        timeout: float | None = None,
        session: Optional[aiohttp.ClientSession] = None,
        ca_bundle: str | None = None,
    ):
        self.config = config
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        try:
            self._ssl_context = create_tls12_context(ca_bundle)
        except OSError as e:
            raise TransportError(
                f"Could not load CA bundle '{ca_bundle}': {e}"
            ) from e
        self._request_options: dict = {"ssl": self._ssl_context}
        if timeout is not None:
            self._request_options["timeout"] = aiohttp.ClientTimeout(total=timeout)

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
            log.debug("Created Artifactory session pinned to TLS 1.2.")
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "ArtifactoryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def url_for(self, artifact_path: str) -> str:
        return build_url(self.config.host, artifact_path)

    @asynccontextmanager
    async def stream(
        self, artifact_path: str
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        Opens a GET for the artifact and yields the response with its body unread.
        The URL is passed pre-encoded so it is sent exactly as built.
        """
        session = await self._initialize_session()
        url = URL(self.url_for(artifact_path), encoded=True)
        log.debug(f"GET {url}")
        async with session.get(
            url, headers=build_headers(self.config), **self._request_options
        ) as response:
            yield response
