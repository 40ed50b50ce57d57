"""
Error classification and per-item failure capture for batch callers.
"""

from typing import Any, Dict, Optional

from pydantic import Field

from ..schemas.bases import CanonicalModel
from ..utils import logger
from .exceptions import (
    ConfigurationError,
    NoOfferError,
    ProtocolError,
    SigningError,
    SpendCapExceededError,
    TransportError,
    UnsupportedNetworkError,
)

# Most specific classes first: NoOfferError is a ProtocolError.
_ERROR_TYPES = (
    (NoOfferError, "no_offer"),
    (ProtocolError, "protocol"),
    (UnsupportedNetworkError, "unsupported_network"),
    (SpendCapExceededError, "spend_cap_exceeded"),
    (SigningError, "signing"),
    (TransportError, "transport"),
    (ConfigurationError, "configuration"),
)


def classify_error(exc: BaseException) -> str:
    """Return the taxonomy name of ``exc`` (``"unexpected"`` if unknown)."""
    for error_class, name in _ERROR_TYPES:
        if isinstance(exc, error_class):
            return name
    return "unexpected"


class ErrorRecord(CanonicalModel):
    """Structured result recorded in place of a failed item."""
    error: str = Field(..., description="Error message")
    error_type: str = Field(..., alias="errorType")
    item_index: Optional[int] = Field(default=None, alias="itemIndex")

    @classmethod
    def from_exception(cls, exc: BaseException, item_index: Optional[int] = None) -> "ErrorRecord":
        return cls(error=str(exc) or type(exc).__name__, error_type=classify_error(exc), item_index=item_index)

    def to_item(self) -> Dict[str, Any]:
        return {"error": self.error, "errorType": self.error_type}


def capture(item_index: int, exc: BaseException) -> ErrorRecord:
    """Record a per-item failure so the batch can carry on."""
    record = ErrorRecord.from_exception(exc, item_index)
    logger.error(f"Item {item_index} failed ({record.error_type}): {record.error}")
    return record
