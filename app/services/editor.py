# app/services/editor.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from app.errors import EngineFailure, ImageEditorError, UnsupportedFormat, ValidationError
from app.logging import log_tool_call
from app.services.sandbox import PathSandbox

logger = logging.getLogger(__name__)

# Encoder chosen by the source extension; the output keeps that extension
COMPRESS_FORMATS: Dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
}

MIN_LEVEL, MAX_LEVEL = 0.1, 10.0
MIN_QUALITY, MAX_QUALITY = 1, 100


# ---------- Results ----------

@dataclass(frozen=True)
class EditSuccess:
    message: str
    output_name: str
    is_error: bool = field(default=False, init=False)

    @property
    def text(self) -> str:
        return self.message

    def to_payload(self) -> Dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}], "isError": False}


@dataclass(frozen=True)
class EditFailure:
    kind: str
    message: str
    is_error: bool = field(default=True, init=False)

    @property
    def text(self) -> str:
        return f"Error: {self.message}"

    def to_payload(self) -> Dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}], "isError": True}


EditResult = Union[EditSuccess, EditFailure]


# ---------- Helpers ----------

def derive_output_path(resolved_path: Path, suffix: str) -> Path:
    """
    Insert `suffix` between the file's stem and its extension, keeping the
    directory and the extension exactly as they were:
      /images/sub/dog.PNG + "-compressed-80" -> /images/sub/dog-compressed-80.PNG
    """
    p = Path(resolved_path)
    return p.parent / f"{p.stem}{suffix}{p.suffix}"


def format_level(level: float) -> str:
    # 2.0 -> "2", 1.5 -> "1.5"
    value = float(level)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _check_level(level: Any) -> None:
    if isinstance(level, bool) or not isinstance(level, (int, float)) or not math.isfinite(level):
        raise ValidationError(f"level must be a number, got {level!r}")
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValidationError(f"level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")


def _check_int(name: str, value: Any, minimum: int, maximum: int | None = None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ValidationError(f"{name} must be {bounds}, got {value}")


# ---------- Orchestrator ----------

class EditOrchestrator:
    """
    Turn one edit request into a confined source path, a derived output path,
    a call into the pixel engine and a tagged result.

    Handlers never raise: every failure (including unexpected engine errors)
    is converted to an EditFailure here so nothing reaches the transport.
    """

    def __init__(self, sandbox: PathSandbox, engine):
        self.sandbox = sandbox
        self.engine = engine

    async def adjust_brightness(self, file_path: str, level: float) -> EditResult:
        log_tool_call(logger, "adjustBrightness", {"filePath": file_path, "level": level})
        try:
            _check_level(level)
            src = self.sandbox.resolve(file_path)
            base = self.sandbox.requested_path(file_path, src)
            dst = derive_output_path(base, f"-brightened-{format_level(level)}")
            await self.engine.brightness(src, dst, float(level))
        except Exception as exc:
            return self._failure("adjustBrightness", exc)
        return self._success(
            f"Adjusted the brightness of {file_path} and saved it as '{dst.name}'.", dst
        )

    async def crop_image(
        self, file_path: str, left: int, top: int, width: int, height: int
    ) -> EditResult:
        log_tool_call(
            logger,
            "cropImage",
            {"filePath": file_path, "left": left, "top": top, "width": width, "height": height},
        )
        try:
            _check_int("left", left, 0)
            _check_int("top", top, 0)
            _check_int("width", width, 1)
            _check_int("height", height, 1)
            src = self.sandbox.resolve(file_path)
            base = self.sandbox.requested_path(file_path, src)
            dst = derive_output_path(base, "-cropped")
            await self.engine.crop(src, dst, (left, top, left + width, top + height))
        except Exception as exc:
            return self._failure("cropImage", exc)
        return self._success(f"Cropped {file_path} and saved it as '{dst.name}'.", dst)

    async def compress_image(self, file_path: str, quality: int) -> EditResult:
        log_tool_call(logger, "compressImage", {"filePath": file_path, "quality": quality})
        try:
            _check_int("quality", quality, MIN_QUALITY, MAX_QUALITY)
            src = self.sandbox.resolve(file_path)
            base = self.sandbox.requested_path(file_path, src)
            dst = derive_output_path(base, f"-compressed-{quality}")
            fmt = COMPRESS_FORMATS.get(base.suffix.lower())
            if fmt is None:
                raise UnsupportedFormat(
                    "Compression is not supported for this image format: "
                    "only jpeg, png and webp are supported."
                )
            await self.engine.compress(src, dst, fmt, quality)
        except Exception as exc:
            return self._failure("compressImage", exc)
        return self._success(
            f"Compressed {file_path} at quality {quality} and saved it as '{dst.name}'.", dst
        )

    # ---------- Internals ----------

    @staticmethod
    def _success(message: str, dst: Path) -> EditSuccess:
        logger.info("wrote %s", dst)
        return EditSuccess(message=message, output_name=dst.name)

    @staticmethod
    def _failure(op: str, exc: Exception) -> EditFailure:
        if isinstance(exc, ImageEditorError):
            logger.warning("%s failed (%s): %s", op, exc.kind, exc)
            return EditFailure(kind=exc.kind, message=str(exc))
        logger.exception("%s failed unexpectedly", op)
        return EditFailure(kind=EngineFailure.kind, message=str(exc) or exc.__class__.__name__)
