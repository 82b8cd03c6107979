# server/registry.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Type

from pydantic import BaseModel

from app.di import Container
from app.services.editor import EditResult

# Import only the Pydantic input models from the tool module.
from server.tools.images import (
    ADJUST_BRIGHTNESS_DESC,
    COMPRESS_IMAGE_DESC,
    CROP_IMAGE_DESC,
    AdjustBrightnessIn,
    CompressImageIn,
    CropImageIn,
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[EditResult]]


class ToolHandlers:
    """
    Named handlers for each tool (no lambdas).
    Unpack the validated model and hand off to the orchestrator.
    """
    def __init__(self, container: Container):
        self.editor = container.editor

    async def adjust_brightness(self, args: AdjustBrightnessIn) -> EditResult:
        return await self.editor.adjust_brightness(args.filePath, args.level)

    async def crop_image(self, args: CropImageIn) -> EditResult:
        return await self.editor.crop_image(
            args.filePath, args.left, args.top, args.width, args.height
        )

    async def compress_image(self, args: CompressImageIn) -> EditResult:
        return await self.editor.compress_image(args.filePath, args.quality)


def _schema_from_model(model: Type[BaseModel]) -> Dict[str, Any]:
    return model.model_json_schema()


def build_tool_registry(container: Container) -> Dict[str, ToolSpec]:
    """
    Build a registry once at startup.
    Transport layers other than FastMCP (HTTP) read from this registry to expose tools.
    """
    handlers = ToolHandlers(container)

    return {
        "adjustBrightness": ToolSpec(
            name="adjustBrightness",
            description=ADJUST_BRIGHTNESS_DESC,
            input_model=AdjustBrightnessIn,
            handler=handlers.adjust_brightness,
        ),
        "cropImage": ToolSpec(
            name="cropImage",
            description=CROP_IMAGE_DESC,
            input_model=CropImageIn,
            handler=handlers.crop_image,
        ),
        "compressImage": ToolSpec(
            name="compressImage",
            description=COMPRESS_IMAGE_DESC,
            input_model=CompressImageIn,
            handler=handlers.compress_image,
        ),
    }


def list_tools_payload(registry: Dict[str, ToolSpec]) -> Dict[str, Any]:
    """
    Produce the `tools/list` payload body as per MCP Tools spec.
    """
    tools = []
    for spec in registry.values():
        tools.append({
            "name": spec.name,
            "description": spec.description,
            "inputSchema": _schema_from_model(spec.input_model),
        })
    return {"tools": tools}


async def dispatch_tool_call(
    registry: Dict[str, ToolSpec], name: str, arguments: Dict[str, Any]
) -> EditResult:
    """
    Validate args with the tool's Pydantic model, then invoke the named handler.
    Raises KeyError for unknown tools and pydantic.ValidationError for bad arguments.
    """
    if name not in registry:
        raise KeyError(f"Tool not found: {name}")
    spec = registry[name]
    args_obj = spec.input_model(**arguments)
    return await spec.handler(args_obj)
