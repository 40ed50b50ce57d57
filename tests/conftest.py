"""
Shared fixtures for the x402 autopay test suite.

Provides a deterministic test wallet, offer/challenge body factories and a
scripted ``httpx.MockTransport`` that records every request it serves.
"""

import base64
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from x402_autopay.adapters.evm.wallets import derive_account
from x402_autopay.clients.dispatcher import RequestDispatcher
from x402_autopay.clients.http_client import Http402Client


# ========================================================================
# Test Constants
# ========================================================================

# Test seed (do not use in production!)
TEST_SEED_BYTES = bytes(range(64))
TEST_SEED_B64 = base64.b64encode(TEST_SEED_BYTES).decode()

PAY_TO = "0x" + "aa" * 20
ASSET = "0x" + "bb" * 20
RESOURCE_URL = "https://api.example.com/paid"


@pytest.fixture
def wallet_seed() -> str:
    return TEST_SEED_B64


@pytest.fixture
def signer():
    """Signing capability derived from the test seed."""
    return derive_account(TEST_SEED_B64)


@pytest.fixture
def offer_data() -> Callable[..., Dict[str, Any]]:
    """Factory for a wire-format offer dict; keyword arguments override fields."""

    def factory(**overrides) -> Dict[str, Any]:
        offer = {
            "scheme": "exact",
            "network": "base-sepolia",
            "maxAmountRequired": "50000",
            "resource": RESOURCE_URL,
            "description": "Premium data",
            "mimeType": "application/json",
            "payTo": PAY_TO,
            "maxTimeoutSeconds": 30,
            "asset": ASSET,
            "extra": {"name": "USD Coin", "version": "2"},
        }
        offer.update(overrides)
        return offer

    return factory


@pytest.fixture
def challenge_body(offer_data) -> Callable[..., Dict[str, Any]]:
    """Factory for a 402 body; ``accepts`` defaults to one default offer."""

    def factory(accepts: Optional[List[Dict[str, Any]]] = None, **offer_overrides) -> Dict[str, Any]:
        return {
            "x402Version": 1,
            "error": "X-PAYMENT header is required",
            "accepts": accepts if accepts is not None else [offer_data(**offer_overrides)],
        }

    return factory


class ScriptedTransport(httpx.MockTransport):
    """
    Mock transport that answers with pre-scripted responses in order and
    records the requests it receives.
    """

    def __init__(self, responses: List[httpx.Response]):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self.responses.pop(0)


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"content-type": "application/json"},
    )


@pytest.fixture
def scripted_transport() -> Callable[..., ScriptedTransport]:
    def factory(*responses: httpx.Response) -> ScriptedTransport:
        return ScriptedTransport(list(responses))

    return factory


@pytest.fixture
def make_client(signer) -> Callable[..., Http402Client]:
    """Build an ``Http402Client`` on top of a scripted transport."""

    def factory(transport: httpx.MockTransport, **kwargs) -> Http402Client:
        dispatcher = RequestDispatcher(httpx.AsyncClient(transport=transport))
        return Http402Client(signer, dispatcher=dispatcher, **kwargs)

    return factory


@pytest.fixture
def respond():
    """Expose ``json_response`` to tests."""
    return json_response
