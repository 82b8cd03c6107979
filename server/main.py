# server/main.py
import argparse
import logging
import sys
from typing import List, Optional

from fastmcp import FastMCP

from app.config import Settings, resolve_image_root
from app.di import Container, build_container
from app.errors import ConfigurationError
from app.logging import configure_logging
from server.tools.images import register_image_tools

logger = logging.getLogger("image_editor")


def create_app(container: Container) -> FastMCP:
    """
    Create the FastMCP host and register tools.
    Keep the server (protocol) separate from tool/service logic.
    """
    s = container.settings
    mcp = FastMCP(s.SERVER_NAME, version=s.SERVER_VERSION)

    # Register tools (thin adapters)
    register_image_tools(mcp, container.editor)
    return mcp


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="image-editor-mcp",
        description="MCP server that edits images inside a single folder.",
    )
    parser.add_argument("image_dir", nargs="?", help="Folder holding the images to edit")
    parser.add_argument("--transport", choices=["stdio", "http"], help="MCP transport")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL setting)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = Settings()
    configure_logging(args.log_level or settings.LOG_LEVEL)

    try:
        root = resolve_image_root(args.image_dir or settings.IMAGE_ROOT)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    container = build_container(root, settings)
    logger.info("Image folder set to '%s'", container.image_root)

    transport = args.transport or settings.MCP_TRANSPORT
    if transport == "http":
        import uvicorn
        from server.http_app import create_http_app

        logger.info(
            "Image editor MCP server listening on http://%s:%s%s",
            settings.MCP_HTTP_HOST, settings.MCP_HTTP_PORT, settings.MCP_HTTP_PATH,
        )
        uvicorn.run(
            create_http_app(container),
            host=settings.MCP_HTTP_HOST,
            port=settings.MCP_HTTP_PORT,
            reload=False,
        )
        return 0

    app = create_app(container)
    logger.info("Image editor MCP server running on stdio, waiting for a client...")
    # stdio transport: client (agent/IDE) launches this process and speaks JSON-RPC on stdin/stdout
    app.run(transport="stdio")
    return 0


if __name__ == "__main__":
    sys.exit(main())
