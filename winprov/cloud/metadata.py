"""
Queries the instance metadata endpoint for the region and the
CloudFormation stack name of the running instance.
"""

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from winprov.exceptions import MetadataError
from winprov.models.config import ToolSettings

log = logging.getLogger(__name__)

IDENTITY_DOCUMENT_PATH = "/latest/dynamic/instance-identity/document"
STACK_NAME_TAG_PATH = "/latest/meta-data/tags/instance/aws:cloudformation:stack-name"


class MetadataClient:
    """Async client for the link-local instance metadata service."""

    def __init__(
        self,
        base_url: str = "http://169.254.169.254",
        timeout: float = 5,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "MetadataClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_text(self, path: str) -> str:
        session = await self._initialize_session()
        url = self.base_url + path
        try:
            async with session.get(url) as r:
                if r.status != 200:
                    raise MetadataError(
                        f"Metadata endpoint returned HTTP {r.status} for '{path}'."
                    )
                return await r.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise MetadataError(f"Metadata endpoint unreachable: {e!r}") from e

    async def get_region(self) -> str:
        """Returns the region from the instance identity document."""
        body = await self._get_text(IDENTITY_DOCUMENT_PATH)
        try:
            document: dict[str, Any] = json.loads(body)
        except json.JSONDecodeError as e:
            raise MetadataError("Instance identity document is not valid JSON.") from e

        region = document.get("region") if isinstance(document, dict) else None
        if not region:
            raise MetadataError("Instance identity document has no 'region' field.")
        log.debug(f"Instance region: {region}")
        return region

    async def get_stack_name(self) -> str:
        """Returns the value of the instance's CloudFormation stack-name tag."""
        stack_name = (await self._get_text(STACK_NAME_TAG_PATH)).strip()
        if not stack_name:
            raise MetadataError("Instance stack-name tag is empty.")
        log.debug(f"Instance stack name: {stack_name}")
        return stack_name


async def get_region(settings: ToolSettings | None = None) -> str:
    settings = settings or ToolSettings()
    async with MetadataClient(settings.metadata_url) as client:
        return await client.get_region()


async def get_stack_name(settings: ToolSettings | None = None) -> str:
    settings = settings or ToolSettings()
    async with MetadataClient(settings.metadata_url) as client:
        return await client.get_stack_name()
