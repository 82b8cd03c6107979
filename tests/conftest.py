# tests/conftest.py
from pathlib import Path

import pytest
from PIL import Image

from app.config import Settings
from app.di import build_container
from app.services.editor import EditOrchestrator
from app.services.sandbox import PathSandbox
from tests.helpers import RecordingEngine


@pytest.fixture
def image_root(tmp_path: Path) -> Path:
    """
    images/
      photo.jpg      64x48 mid-grey
      small.png      50x50 RGBA
      image.gif      16x16 palette
      icon.webp      32x32
      broken.jpg     not an image
      sub/dog.PNG    40x30
    """
    root = tmp_path / "images"
    (root / "sub").mkdir(parents=True)
    Image.new("RGB", (64, 48), (100, 100, 100)).save(root / "photo.jpg", format="JPEG")
    Image.new("RGBA", (50, 50), (10, 200, 30, 255)).save(root / "small.png", format="PNG")
    Image.new("P", (16, 16), 3).save(root / "image.gif", format="GIF")
    Image.new("RGB", (32, 32), (0, 0, 255)).save(root / "icon.webp", format="WEBP")
    (root / "broken.jpg").write_bytes(b"definitely not a jpeg")
    Image.new("RGB", (40, 30), (200, 50, 50)).save(root / "sub" / "dog.PNG", format="PNG")
    return root.resolve()


@pytest.fixture
def settings() -> Settings:
    return Settings(MCP_HTTP_BEARER_TOKEN="test-token", LOG_LEVEL="DEBUG")


@pytest.fixture
def container(image_root: Path, settings: Settings):
    return build_container(image_root, settings)


@pytest.fixture
def recording_engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def fake_editor(image_root: Path, recording_engine: RecordingEngine) -> EditOrchestrator:
    return EditOrchestrator(PathSandbox(image_root), recording_engine)
