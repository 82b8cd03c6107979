from pathlib import Path

import pytest

from app.config import resolve_image_root
from app.errors import ConfigurationError
from server.main import main


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_missing_root_is_configuration_error(raw):
    with pytest.raises(ConfigurationError):
        resolve_image_root(raw)


def test_nonexistent_root_is_configuration_error(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        resolve_image_root(tmp_path / "nope")


def test_file_root_is_configuration_error(tmp_path: Path):
    f = tmp_path / "a.jpg"
    f.write_bytes(b"x")
    with pytest.raises(ConfigurationError):
        resolve_image_root(f)


def test_root_is_canonicalized(tmp_path: Path):
    (tmp_path / "images").mkdir()
    assert resolve_image_root(str(tmp_path / "images" / ".." / "images")) == (tmp_path / "images").resolve()


def test_main_fails_fast_on_bad_root(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("IMAGE_ROOT", raising=False)
    monkeypatch.chdir(tmp_path)
    assert main([str(tmp_path / "missing")]) == 1
    assert main([]) == 1
