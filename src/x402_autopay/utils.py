import json
import logging
from typing import Any, Dict, Optional, Union

logger = logging.getLogger("x402_autopay")


def setup_logger(level: Union[int, str] = logging.INFO, fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling it twice does not add a second handler; only the level changes.
    """
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        logger.addHandler(handler)
    return logger


def canonical_json(data: Dict[str, Any]) -> str:
    """
    RFC8785-ish: sort_keys + no whitespace
    """
    return json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def short_hex(value: Optional[str], keep: int = 10) -> str:
    """Shorten a hex string for log output."""
    if not value:
        return ""
    return value if len(value) <= keep * 2 else f"{value[:keep]}...{value[-4:]}"
