# app/services/engine.py
from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

from PIL import Image, ImageEnhance

from app.errors import EngineFailure

# Re-encoding in the source format should not visibly degrade the edit
_REENCODE_PARAMS: Dict[str, Dict[str, Any]] = {
    "JPEG": {"quality": 95},
    "WEBP": {"quality": 95},
    "MPO": {"quality": 95},
}


def _open(src: Path) -> Image.Image:
    with Image.open(src) as img:
        img.load()
        # copy() drops .format
        fmt = img.format
        out = img.copy()
    out.format = fmt
    return out


def _to_8bit(img: Image.Image) -> Image.Image:
    if img.mode == "P":
        return img.convert("RGBA" if "transparency" in img.info else "RGB")
    if img.mode == "1":
        return img.convert("L")
    if img.mode.startswith("I"):
        # I;16* and I hold 16-bit samples; scale down to 8-bit L for blend() and the lossy encoders
        return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if img.mode == "F":
        return img.convert("L")
    return img


def _save_atomic(img: Image.Image, dst: Path, fmt: str, src: Path, **params) -> None:
    """
    Encode into a temp file beside `dst` and move it into place, so a failed
    encode never leaves a partial output behind.
    """
    fd, tmp = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            img.save(fh, format=fmt, **params)
        shutil.copymode(src, tmp)
        os.replace(tmp, dst)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


def _source_params(img: Image.Image) -> Dict[str, Any]:
    params = dict(_REENCODE_PARAMS.get(img.format or "", {}))
    icc = img.info.get("icc_profile")
    if icc:
        params["icc_profile"] = icc
    return params


class PillowEngine:
    """
    Pixel-processing engine backed by Pillow.

    Every public method is a coroutine that runs the blocking decode/transform/
    encode in a worker thread and awaits it to completion. Pillow and OS errors
    come back as EngineFailure.
    """

    async def _run(self, fn: Callable[..., None], *args) -> None:
        try:
            await asyncio.to_thread(fn, *args)
        except EngineFailure:
            raise
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise EngineFailure(str(exc) or exc.__class__.__name__) from exc

    # ---------- Public API ----------

    async def brightness(self, src: Path, dst: Path, level: float) -> None:
        await self._run(self._brightness, src, dst, level)

    async def crop(self, src: Path, dst: Path, box: Tuple[int, int, int, int]) -> None:
        await self._run(self._crop, src, dst, box)

    async def compress(self, src: Path, dst: Path, fmt: str, quality: int) -> None:
        await self._run(self._compress, src, dst, fmt, quality)

    # ---------- Workers (run off the event loop) ----------

    def _brightness(self, src: Path, dst: Path, level: float) -> None:
        img = _open(src)
        fmt = img.format
        params = _source_params(img)
        out = ImageEnhance.Brightness(_to_8bit(img)).enhance(level)
        _save_atomic(out, dst, fmt, src, **params)

    def _crop(self, src: Path, dst: Path, box: Tuple[int, int, int, int]) -> None:
        img = _open(src)
        left, top, right, bottom = box
        w, h = img.size
        if right > w or bottom > h:
            raise EngineFailure(
                f"Crop area {left},{top},{right - left}x{bottom - top} "
                f"exceeds image bounds {w}x{h}"
            )
        out = img.crop(box)
        _save_atomic(out, dst, img.format, src, **_source_params(img))

    def _compress(self, src: Path, dst: Path, fmt: str, quality: int) -> None:
        img = _open(src)
        icc = img.info.get("icc_profile")
        params: Dict[str, Any] = {"icc_profile": icc} if icc else {}

        if fmt in ("JPEG", "WEBP") or quality < 100:
            img = _to_8bit(img)

        if fmt == "JPEG":
            if img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")
            params.update(quality=quality, optimize=True)
        elif fmt == "WEBP":
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() or "transparency" in img.info else "RGB")
            params.update(quality=quality)
        elif fmt == "PNG":
            if quality < 100:
                img = self._quantize(img, max(2, 256 * quality // 100))
            params.update(optimize=True)
        else:
            raise EngineFailure(f"No encoder for format: {fmt}")

        _save_atomic(img, dst, fmt, src, **params)

    @staticmethod
    def _quantize(img: Image.Image, colors: int) -> Image.Image:
        # Lossy PNG: fewer palette colours for lower quality
        if img.mode == "P" or img.mode == "LA" or "transparency" in img.info:
            img = img.convert("RGBA")
        if img.mode == "RGBA":
            return img.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img.quantize(colors=colors)
