# app/errors.py
from __future__ import annotations


class ImageEditorError(Exception):
    """Base error. `kind` tags the failure in tool responses and logs."""

    kind = "ImageEditorError"


class ConfigurationError(ImageEditorError):
    kind = "ConfigurationError"


class SandboxViolation(ImageEditorError):
    kind = "SandboxViolation"


class NotFound(ImageEditorError):
    kind = "NotFound"


class ValidationError(ImageEditorError):
    kind = "ValidationError"


class UnsupportedFormat(ImageEditorError):
    kind = "UnsupportedFormat"


class EngineFailure(ImageEditorError):
    kind = "EngineFailure"
