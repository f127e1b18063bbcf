import pytest
from aiohttp import web

from winprov.cloud.metadata import (
    IDENTITY_DOCUMENT_PATH,
    STACK_NAME_TAG_PATH,
    MetadataClient,
    get_region,
    get_stack_name,
)
from winprov.exceptions import MetadataError
from winprov.models.config import ToolSettings


async def _identity(request: web.Request) -> web.Response:
    return web.json_response(
        {"region": "eu-west-1", "instanceId": "i-0123456789abcdef0"}
    )


async def _stack_name(request: web.Request) -> web.Response:
    return web.Response(text="web-tier-prod\n")


async def test_region_comes_from_identity_document(http_server) -> None:
    base = await http_server({IDENTITY_DOCUMENT_PATH: _identity})

    async with MetadataClient(base) as client:
        assert await client.get_region() == "eu-west-1"


async def test_stack_name_comes_from_instance_tag(http_server) -> None:
    base = await http_server({STACK_NAME_TAG_PATH: _stack_name})

    assert await get_stack_name(ToolSettings(metadata_url=base)) == "web-tier-prod"


async def test_module_level_region_uses_settings_url(http_server) -> None:
    base = await http_server({IDENTITY_DOCUMENT_PATH: _identity})

    assert await get_region(ToolSettings(metadata_url=base + "/")) == "eu-west-1"


async def test_missing_tag_is_metadata_error(http_server) -> None:
    base = await http_server({IDENTITY_DOCUMENT_PATH: _identity})

    async with MetadataClient(base) as client:
        with pytest.raises(MetadataError, match="404"):
            await client.get_stack_name()


async def test_document_without_region_is_metadata_error(http_server) -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"instanceId": "i-1"})

    base = await http_server({IDENTITY_DOCUMENT_PATH: handler})

    async with MetadataClient(base) as client:
        with pytest.raises(MetadataError, match="region"):
            await client.get_region()


async def test_unreachable_endpoint_is_metadata_error(unused_port: int) -> None:
    async with MetadataClient(f"http://127.0.0.1:{unused_port}", timeout=2) as client:
        with pytest.raises(MetadataError, match="unreachable"):
            await client.get_region()
