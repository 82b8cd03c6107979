import os
from pathlib import Path

import pytest

from app.errors import NotFound, SandboxViolation, ValidationError
from app.services.sandbox import PathSandbox


def test_resolve_existing_file(image_root: Path):
    sb = PathSandbox(image_root)
    assert sb.resolve("photo.jpg") == image_root / "photo.jpg"
    assert sb.resolve("sub/dog.PNG") == image_root / "sub" / "dog.PNG"
    assert sb.resolve("sub/../photo.jpg") == image_root / "photo.jpg"
    assert sb.resolve("./photo.jpg").is_absolute()


def test_empty_path_resolves_to_root(image_root: Path):
    assert PathSandbox(image_root).resolve("") == image_root


def test_parent_escape_is_violation(image_root: Path):
    (image_root.parent / "secret.txt").write_text("s")
    sb = PathSandbox(image_root)
    with pytest.raises(SandboxViolation):
        sb.resolve("../secret.txt")
    with pytest.raises(SandboxViolation):
        sb.resolve("sub/../../secret.txt")


def test_sibling_with_shared_prefix_is_violation(image_root: Path):
    evil = image_root.parent / (image_root.name + "-evil")
    evil.mkdir()
    (evil / "x.jpg").write_bytes(b"x")
    with pytest.raises(SandboxViolation):
        PathSandbox(image_root).resolve(f"../{evil.name}/x.jpg")


def test_absolute_path_outside_root_is_violation(image_root: Path):
    with pytest.raises(SandboxViolation):
        PathSandbox(image_root).resolve("/etc/passwd")


def test_absolute_path_inside_root_is_allowed(image_root: Path):
    target = image_root / "photo.jpg"
    assert PathSandbox(image_root).resolve(str(target)) == target


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlink_escape_is_violation(image_root: Path):
    outside = image_root.parent / "outside.jpg"
    outside.write_bytes(b"x")
    (image_root / "link.jpg").symlink_to(outside)
    with pytest.raises(SandboxViolation):
        PathSandbox(image_root).resolve("link.jpg")


def test_missing_file_is_not_found(image_root: Path):
    with pytest.raises(NotFound) as ei:
        PathSandbox(image_root).resolve("nope.jpg")
    assert "nope.jpg" in str(ei.value)


def test_escape_is_checked_before_existence(image_root: Path):
    with pytest.raises(SandboxViolation):
        PathSandbox(image_root).resolve("../does-not-exist.jpg")


def test_nul_byte_is_rejected(image_root: Path):
    with pytest.raises(ValidationError):
        PathSandbox(image_root).resolve("photo\x00.jpg")


def test_no_caching_between_calls(image_root: Path):
    sb = PathSandbox(image_root)
    assert sb.resolve("photo.jpg")
    (image_root / "photo.jpg").unlink()
    with pytest.raises(NotFound):
        sb.resolve("photo.jpg")
