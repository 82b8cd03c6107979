# app/di.py
from dataclasses import dataclass
from pathlib import Path

from app.config import Settings
from app.services.editor import EditOrchestrator
from app.services.engine import PillowEngine
from app.services.sandbox import PathSandbox


@dataclass(frozen=True)
class Container:
    settings: Settings
    image_root: Path
    sandbox: PathSandbox
    engine: PillowEngine
    editor: EditOrchestrator


def build_container(image_root: Path, settings: Settings | None = None) -> Container:
    """
    Wire services once at startup. `image_root` must already be validated
    (see app.config.resolve_image_root); it is shared read-only from here on.
    """
    s = settings or Settings()
    sandbox = PathSandbox(image_root)
    engine = PillowEngine()
    editor = EditOrchestrator(sandbox, engine)
    return Container(s, sandbox.root, sandbox, engine, editor)
