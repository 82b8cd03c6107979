# server/tools/images.py
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field

from app.services.editor import EditResult

FilePath = Annotated[
    str, Field(description="File name of the image inside the image folder (e.g. my_photo.jpg)")
]
Level = Annotated[
    float,
    Field(
        ge=0.1,
        le=10,
        description="Brightness level. 1 is unchanged, above 1 is brighter, "
        "below 1 is darker (e.g. 1.5)",
    ),
]
Left = Annotated[int, Field(ge=0, description="X coordinate of the top-left corner of the crop area")]
Top = Annotated[int, Field(ge=0, description="Y coordinate of the top-left corner of the crop area")]
Width = Annotated[int, Field(ge=1, description="Width of the crop area")]
Height = Annotated[int, Field(ge=1, description="Height of the crop area")]
Quality = Annotated[
    int, Field(ge=1, le=100, description="Quality after compression (integer 1-100, 80 recommended)")
]


class AdjustBrightnessIn(BaseModel):
    filePath: FilePath
    level: Level


class CropImageIn(BaseModel):
    filePath: FilePath
    left: Left
    top: Top
    width: Width
    height: Height


class CompressImageIn(BaseModel):
    filePath: FilePath
    quality: Quality


ADJUST_BRIGHTNESS_DESC = "Adjust the brightness of an image."
CROP_IMAGE_DESC = (
    "Crop an image to the given area. The extracted region keeps its aspect ratio (no rescaling)."
)
COMPRESS_IMAGE_DESC = "Reduce the size of an image by re-encoding it at a lower quality."


def _unwrap(result: EditResult) -> str:
    # FastMCP marks the response isError when a tool raises ToolError
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def register_image_tools(mcp: FastMCP, editor):
    """
    Very thin tool adapters:
    - validate/deserialize inputs (Pydantic, via the annotated parameters)
    - call the orchestrator (path safety + engine)
    - map the tagged result onto the MCP response
    """

    @mcp.tool(name="adjustBrightness", description=ADJUST_BRIGHTNESS_DESC)
    async def adjust_brightness(filePath: FilePath, level: Level) -> str:
        return _unwrap(await editor.adjust_brightness(filePath, level))

    @mcp.tool(name="cropImage", description=CROP_IMAGE_DESC)
    async def crop_image(
        filePath: FilePath, left: Left, top: Top, width: Width, height: Height
    ) -> str:
        return _unwrap(await editor.crop_image(filePath, left, top, width, height))

    @mcp.tool(name="compressImage", description=COMPRESS_IMAGE_DESC)
    async def compress_image(filePath: FilePath, quality: Quality) -> str:
        return _unwrap(await editor.compress_image(filePath, quality))
