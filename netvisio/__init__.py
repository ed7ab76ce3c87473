"""Network topology discovery and visualization toolkit.

Builds a rooted device tree (routers, switches, endpoints) from a heuristic
HTTP subnet probe, pasted ``arp -a`` text, or a generative-AI assistant.
"""

__version__ = "0.0.1"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from netvisio.exceptions import (  # noqa: E402
    ConfigurationError,
    NetvisioError,
    RemoteCallError,
    TopologyError,
)
from netvisio.retry import RetryPolicy, call_with_retry, is_transient, retryable  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "NetvisioError",
    "RemoteCallError",
    "TopologyError",
    "ConfigurationError",
    "RetryPolicy",
    "call_with_retry",
    "retryable",
    "is_transient",
]
