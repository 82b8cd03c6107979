# app/config.py
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Image directory (the command-line argument takes precedence)
    IMAGE_ROOT: Path | None = None

    # Server identity
    SERVER_NAME: str = "image-editor-mcp"
    SERVER_VERSION: str = "1.0.0"
    MCP_TRANSPORT: Literal["stdio", "http"] = "stdio"

    # HTTP MCP transport
    MCP_HTTP_HOST: str = "127.0.0.1"
    MCP_HTTP_PORT: int = 8080
    MCP_HTTP_PATH: str = "/mcp"

    # Security: Bearer token and allowed origins
    MCP_HTTP_BEARER_TOKEN: str = "change-me"         # set in .env for prod
    MCP_HTTP_ALLOWED_ORIGINS: str = "http://localhost, http://127.0.0.1"
    MCP_HTTP_ALLOW_NO_ORIGIN: bool = True            # allow non-browser clients

    # Logging
    LOG_LEVEL: str = "INFO"


def resolve_image_root(raw: str | Path | None) -> Path:
    """
    Validate the startup image directory and return its canonical absolute path.
    Called once at launch; the result is never re-resolved.
    """
    if raw is None or str(raw).strip() == "":
        raise ConfigurationError(
            "No image directory given. Usage: image-editor-mcp /path/to/your/images"
        )
    path = Path(raw).expanduser()
    if not path.exists() or not path.is_dir():
        raise ConfigurationError(f"Path does not exist or is not a directory: {raw}")
    return path.resolve()
