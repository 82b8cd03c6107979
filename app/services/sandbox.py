# app/services/sandbox.py
import os
from pathlib import Path

from app.errors import NotFound, SandboxViolation, ValidationError


class PathSandbox:
    """
    Confine every image access to the directory fixed at startup.
    Checked on every call: the filesystem can change between calls.
    """

    def __init__(self, root: Path):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def contains(self, candidate: Path) -> bool:
        # Segment-wise check; "/images-evil" is not inside "/images"
        return candidate == self._root or self._root in candidate.parents

    def resolve(self, rel_path: str) -> Path:
        if not isinstance(rel_path, str) or "\x00" in rel_path:
            raise ValidationError(f"Invalid file path: {rel_path!r}")
        try:
            # resolve() collapses ".." and follows symlinks (symlink escape)
            candidate = (self._root / rel_path).resolve()
        except (ValueError, OSError) as exc:
            raise ValidationError(f"Invalid file path: {rel_path!r}") from exc

        if not self.contains(candidate):
            raise SandboxViolation(
                "Security error: files outside the image folder cannot be accessed."
            )
        if not candidate.exists():
            raise NotFound(f"File not found: {rel_path}")
        return candidate

    def requested_path(self, rel_path: str, resolved: Path) -> Path:
        """
        Where `rel_path` points before symlinks are followed, for naming
        outputs after what the client asked for. Falls back to `resolved`
        when that location's directory is not inside the root.
        """
        lexical = Path(os.path.normpath(self._root / rel_path))
        parent = lexical.parent.resolve()
        if lexical.name and self.contains(parent):
            return parent / lexical.name
        return resolved
