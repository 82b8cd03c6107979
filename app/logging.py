# app/logging.py
import logging
import os
import sys
from typing import Any, Dict, Optional


def configure_logging(level: Optional[str] = None):
    # stdout carries the stdio JSON-RPC stream, so diagnostics go to stderr
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def log_tool_call(logger: logging.Logger, name: str, args: Dict[str, Any]):
    logger.info("tool_call %s %s", name, args)
