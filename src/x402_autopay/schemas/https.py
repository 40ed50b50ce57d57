"""
HTTP Request/Response Schema Models for the x402 Payment Protocol

This module defines the Pydantic models used on both sides of the x402
challenge/response exchange as seen by a paying client:

1. Server's 402 challenge body (``PaymentChallenge`` / ``PaymentOffer``)
2. Client's ``X-PAYMENT`` proof header (``PaymentHeader``)
3. Caller-facing request description (``RequestOptions`` / ``RequestContext``)
4. Dispatch and final results (``DispatchResponse`` / ``PaymentResult``)

Wire names are declared as aliases; Python attributes use snake_case.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from .bases import CanonicalModel
from .versions import DEFAULT_PROTOCOL_VERSION


def _to_decimal(value: Any) -> Any:
    # floats go through str() to avoid binary-float surprises (0.1 -> 0.1000000000000000055...)
    if isinstance(value, float):
        return Decimal(str(value))
    return value


# ============================================================================
# Step 1: Server's 402 Payment Required Challenge
# ============================================================================

class PaymentOffer(CanonicalModel):
    """One acceptable set of payment terms from an ``accepts`` list.

    Unknown wire keys are preserved so that a re-serialized offer carries
    everything the server sent.

    Attributes:
        scheme: Payment scheme identifier (e.g. ``"exact"``).
        network: Network alias, resolved through the network registry.
        max_amount_required: Amount in asset base units as a decimal integer string.
        resource: URL of the paid resource.
        description: Human-readable description of the resource.
        mime_type: MIME type of the paid resource.
        pay_to: Recipient account address.
        max_timeout_seconds: Validity window for the authorization.
        asset: Contract address of the payment asset.
        extra: Optional metadata (``name`` / ``version`` of the EIP-712 domain).
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    scheme: str = Field(..., description="Payment scheme identifier")
    network: str = Field(..., description="Network alias")
    max_amount_required: str = Field(
        ...,
        alias="maxAmountRequired",
        pattern=r"^[0-9]+$",
        description="Amount in asset base units",
    )
    resource: str = Field(default="", description="Paid resource URL")
    description: str = Field(default="", description="Resource description")
    mime_type: str = Field(default="", alias="mimeType", description="Resource MIME type")
    pay_to: str = Field(..., alias="payTo", description="Recipient address")
    max_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        alias="maxTimeoutSeconds",
        description="Authorization validity window in seconds",
    )
    asset: str = Field(..., description="Payment asset contract address")
    extra: Optional[Dict[str, Any]] = Field(default=None, description="Asset metadata")

    @field_validator("max_amount_required", mode="before")
    @classmethod
    def _amount_as_string(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def extra_value(self, key: str) -> Optional[Any]:
        """Return ``extra[key]`` if present and truthy, else None."""
        if not self.extra:
            return None
        return self.extra.get(key) or None


class PaymentChallenge(CanonicalModel):
    """Body of an HTTP 402 response.

    Attributes:
        x402_version: Protocol version announced by the server.
        error: Server-provided reason for the challenge.
        accepts: Ordered list of acceptable offers. May be empty here;
            offer selection rejects an empty list.
    """
    x402_version: int = Field(default=int(DEFAULT_PROTOCOL_VERSION), alias="x402Version")
    error: str = Field(default="")
    accepts: List[PaymentOffer] = Field(...)


# ============================================================================
# Step 2: Client's Payment Proof Header
# ============================================================================

class PaymentHeader(CanonicalModel):
    """Decoded ``X-PAYMENT`` header value.

    ``nonce`` and ``deadline`` travel as decimal strings so that uint256
    values survive JSON parsers limited to 53-bit integers.
    """
    version: int
    scheme: str
    signature: str
    amount: str
    asset: str
    recipient: str
    payer: str
    nonce: str
    deadline: str
    network: str


# ============================================================================
# Step 3: Caller-facing Request Description
# ============================================================================

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
BodyContentType = Literal["application/json", "application/x-www-form-urlencoded", "text/plain"]

#: Methods that carry a request body.
BODY_METHODS = ("POST", "PUT", "PATCH")


class RequestContext(CanonicalModel):
    """Everything one orchestrator invocation needs about the request.

    Owned by a single invocation; never shared between items.
    """
    url: str
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    max_payment_usd: Decimal = Field(default=Decimal("0.1"), ge=0)
    network: Optional[str] = Field(
        default=None,
        description="Network pre-selected by the caller; None trusts the challenge",
    )

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("max_payment_usd", mode="before")
    @classmethod
    def _cap_as_decimal(cls, value: Any) -> Any:
        return _to_decimal(value)


class HeaderParameter(CanonicalModel):
    name: str = ""
    value: str = ""


class RequestOptions(CanonicalModel):
    """Caller-facing request parameters.

    Mirrors the options a workflow user fills in: URL, method, optional body
    with its content type, optional custom headers, network pre-selection
    and the maximum payment in USD.
    """
    url: str
    method: HttpMethod = "GET"
    send_body: bool = False
    content_type: BodyContentType = "application/json"
    json_body: Union[str, Dict[str, Any], List[Any]] = "{}"
    raw_body: str = ""
    send_headers: bool = False
    headers: List[HeaderParameter] = Field(default_factory=list)
    max_payment_usd: Decimal = Field(default=Decimal("0.1"), ge=0)
    network: Optional[str] = None

    @field_validator("max_payment_usd", mode="before")
    @classmethod
    def _cap_as_decimal(cls, value: Any) -> Any:
        return _to_decimal(value)

    def to_context(self) -> RequestContext:
        """
        Build the request headers and body.

        Headers start with ``Content-Type: application/json``; custom headers
        with an empty name are skipped. A body is only attached for
        POST/PUT/PATCH when ``send_body`` is set.
        """
        headers: Dict[str, str] = {"Content-Type": "application/json"}

        if self.send_headers:
            for header in self.headers:
                if header.name:
                    headers[header.name] = header.value

        body: Optional[str] = None
        if self.send_body and self.method in BODY_METHODS:
            headers["Content-Type"] = self.content_type
            if self.content_type == "application/json":
                body = self.json_body if isinstance(self.json_body, str) else json.dumps(self.json_body)
            else:
                body = self.raw_body

        return RequestContext(
            url=self.url,
            method=self.method,
            headers=headers,
            body=body,
            max_payment_usd=self.max_payment_usd,
            network=self.network,
        )


# ============================================================================
# Step 4: Dispatch and Final Results
# ============================================================================

class DispatchResponse(CanonicalModel):
    """Raw outcome of one HTTP dispatch, whatever the status code."""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None


class PaymentReceipt(CanonicalModel):
    """Payment metadata merged into a paid result as ``_x402Payment``."""
    amount: str = Field(..., description="USD amount with six decimals")
    amount_raw: str = Field(..., alias="amountRaw")
    network: str
    chain_id: int = Field(..., alias="chainId")
    asset: str
    asset_name: str = Field(..., alias="assetName")
    recipient: str
    payer: str
    status: Literal["paid"] = "paid"
    signature: str


class PaymentResult(CanonicalModel):
    """Final result of one orchestrated request.

    ``payment`` is only set when the paid retry was not challenged again.
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None
    payment: Optional[PaymentReceipt] = None

    @property
    def paid(self) -> bool:
        return self.payment is not None

    def to_item(self) -> Dict[str, Any]:
        """
        Convert to a caller item.

        Object bodies are returned as-is; other bodies are wrapped under
        ``data``. Paid results gain an ``_x402Payment`` entry.
        """
        if isinstance(self.body, dict):
            item = dict(self.body)
        elif self.body is None:
            item = {}
        else:
            item = {"data": self.body}

        if self.payment is not None:
            item["_x402Payment"] = self.payment.to_dict()
        return item
