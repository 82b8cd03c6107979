# tests/helpers.py
from pathlib import Path


class RecordingEngine:
    """Engine stand-in that records calls and writes nothing."""

    def __init__(self, fail_with: Exception | None = None):
        self.calls = []
        self.fail_with = fail_with

    async def _record(self, *args):
        self.calls.append(args)
        if self.fail_with is not None:
            raise self.fail_with

    async def brightness(self, src, dst, level):
        await self._record("brightness", src, dst, level)

    async def crop(self, src, dst, box):
        await self._record("crop", src, dst, box)

    async def compress(self, src, dst, fmt, quality):
        await self._record("compress", src, dst, fmt, quality)


def listing(root: Path) -> set:
    return {str(p.relative_to(root)) for p in root.rglob("*")}
