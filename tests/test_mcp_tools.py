import asyncio
from pathlib import Path

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from server.main import create_app


def test_tools_registered_with_fastmcp(container):
    async def go():
        async with Client(create_app(container)) as client:
            return await client.list_tools()

    names = {t.name for t in asyncio.run(go())}
    assert names == {"adjustBrightness", "cropImage", "compressImage"}


def test_call_tool_over_fastmcp(container, image_root: Path):
    async def go():
        async with Client(create_app(container)) as client:
            return await client.call_tool("adjustBrightness", {"filePath": "photo.jpg", "level": 1.5})

    result = asyncio.run(go())
    assert "photo-brightened-1.5.jpg" in result.content[0].text
    assert (image_root / "photo-brightened-1.5.jpg").exists()


def test_failure_sets_error_flag(container, image_root: Path):
    async def go():
        async with Client(create_app(container)) as client:
            await client.call_tool("compressImage", {"filePath": "image.gif", "quality": 50})

    with pytest.raises(ToolError, match="only jpeg, png and webp"):
        asyncio.run(go())
    assert not (image_root / "image-compressed-50.gif").exists()
