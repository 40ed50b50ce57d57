"""
End-to-end tests of the 402 payment flow against a scripted transport.
"""

import asyncio
import json
import time
from decimal import Decimal

import httpx
import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from x402_autopay.adapters.bases import TypedDataSigner
from x402_autopay.adapters.evm.signatures import build_payment_typed_data
from x402_autopay.clients.dispatcher import RequestDispatcher
from x402_autopay.clients.http_client import Http402Client
from x402_autopay.config import ClientSettings
from x402_autopay.engine.exceptions import (
    NetworkMismatchError,
    NoOfferError,
    ProtocolError,
    SpendCapExceededError,
    TransportError,
    UnsupportedNetworkError,
)
from x402_autopay.engine.reporter import ErrorRecord
from x402_autopay.schemas.https import HeaderParameter, PaymentOffer, RequestContext, RequestOptions

URL = "https://api.example.com/paid"


class SpySigner(TypedDataSigner):
    """Delegates to a real signer and records every signing call."""

    def __init__(self, inner: TypedDataSigner):
        self.inner = inner
        self.calls = []

    @property
    def address(self) -> str:
        return self.inner.address

    async def sign_typed_data(self, typed_data):
        self.calls.append(typed_data)
        return await self.inner.sign_typed_data(typed_data)


@pytest.fixture
def spy(signer):
    return SpySigner(signer)


@pytest.fixture
def spy_client(spy):
    """Like ``make_client`` but signing through the spy."""

    def factory(transport, **kwargs):
        return Http402Client(spy, dispatcher=RequestDispatcher(httpx.AsyncClient(transport=transport)), **kwargs)

    return factory


# ========================================================================
# Scenario A: no payment needed
# ========================================================================

@pytest.mark.asyncio
async def test_non_402_passes_through(scripted_transport, make_client, respond):
    transport = scripted_transport(respond(200, {"data": "free"}))

    async with make_client(transport) as client:
        result = await client.execute(RequestContext(url=URL))

    assert result.status_code == 200
    assert result.body == {"data": "free"}
    assert not result.paid
    assert result.to_item() == {"data": "free"}
    assert len(transport.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 404, 500])
async def test_error_statuses_are_results_not_exceptions(scripted_transport, make_client, respond, status):
    transport = scripted_transport(respond(status, {"error": "nope"}))

    result = await make_client(transport).execute(RequestContext(url=URL))

    assert result.status_code == status
    assert result.payment is None
    assert len(transport.requests) == 1


# ========================================================================
# Scenario B: paid within cap
# ========================================================================

@pytest.mark.asyncio
async def test_payment_within_cap(scripted_transport, make_client, respond, challenge_body, signer):
    transport = scripted_transport(
        respond(402, challenge_body()),
        respond(200, {"data": "premium"}),
    )

    result = await make_client(transport).execute(RequestContext(url=URL, max_payment_usd=0.10))

    assert result.status_code == 200
    assert result.paid
    item = result.to_item()
    assert item["data"] == "premium"
    receipt = item["_x402Payment"]
    assert receipt["status"] == "paid"
    assert receipt["amount"] == "0.050000"
    assert receipt["amountRaw"] == "50000"
    assert receipt["network"] == "base-sepolia"
    assert receipt["chainId"] == 84532
    assert receipt["assetName"] == "USD Coin"
    assert receipt["payer"] == signer.address

    assert len(transport.requests) == 2
    assert "X-PAYMENT" not in transport.requests[0].headers
    header = json.loads(transport.requests[1].headers["X-PAYMENT"])
    assert header["signature"] == receipt["signature"]
    assert header["amount"] == "50000"
    assert header["network"] == "base-sepolia"


@pytest.mark.asyncio
async def test_payment_signature_recovers_to_payer(scripted_transport, make_client, respond, challenge_body, offer_data, signer):
    transport = scripted_transport(respond(402, challenge_body()), respond(200, {}))

    await make_client(transport).execute(RequestContext(url=URL))

    header = json.loads(transport.requests[1].headers["X-PAYMENT"])
    typed_data = build_payment_typed_data(
        PaymentOffer.model_validate(offer_data()),
        chain_id=84532,
        nonce=int(header["nonce"]),
        deadline=int(header["deadline"]),
    ).to_dict()
    recovered = Account.recover_message(encode_typed_data(full_message=typed_data), signature=header["signature"])
    assert recovered == signer.address == header["payer"]


@pytest.mark.asyncio
async def test_retry_preserves_method_body_and_headers(scripted_transport, make_client, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body()), respond(201, {"ok": True}))
    ctx = RequestContext(
        url=URL,
        method="post",
        headers={"Content-Type": "application/json", "Authorization": "Bearer t", "x-payment": "stale"},
        body='{"q": 1}',
    )

    result = await make_client(transport).execute(ctx)

    assert result.status_code == 201
    first, second = transport.requests
    assert first.method == second.method == "POST"
    assert first.content == second.content == b'{"q": 1}'
    assert second.headers["Authorization"] == "Bearer t"
    values = second.headers.get_list("x-payment")
    assert len(values) == 1
    assert values[0] != "stale"
    # Caller's context is not mutated
    assert ctx.headers["x-payment"] == "stale"


# ========================================================================
# Scenario C: over cap, nothing is signed
# ========================================================================

@pytest.mark.asyncio
async def test_over_cap_never_signs(scripted_transport, spy_client, spy, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body(maxAmountRequired="200000")))

    with pytest.raises(SpendCapExceededError) as exc_info:
        await spy_client(transport).execute(RequestContext(url=URL, max_payment_usd=0.10))

    assert "Payment required ($0.200000) exceeds maximum allowed" in str(exc_info.value)
    assert spy.calls == []
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_zero_cap_allows_free_offer(scripted_transport, spy_client, spy, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body(maxAmountRequired="0")), respond(200, {}))

    result = await spy_client(transport).execute(RequestContext(url=URL, max_payment_usd=0))

    assert result.payment.amount == "0.000000"
    assert len(spy.calls) == 1


# ========================================================================
# Scenarios D and E: unusable challenges
# ========================================================================

@pytest.mark.asyncio
async def test_empty_accepts_is_no_offer(scripted_transport, spy_client, spy, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body(accepts=[])))

    with pytest.raises(NoOfferError):
        await spy_client(transport).execute(RequestContext(url=URL))
    assert spy.calls == []


@pytest.mark.asyncio
async def test_unknown_network_lists_supported_aliases(scripted_transport, spy_client, spy, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body(network="unknownchain")))

    with pytest.raises(UnsupportedNetworkError) as exc_info:
        await spy_client(transport).execute(RequestContext(url=URL))

    message = str(exc_info.value)
    assert '"unknownchain"' in message
    assert "base-sepolia" in message
    assert "polygon" in message
    assert spy.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["<html>402</html>", {"x402Version": 1}])
async def test_malformed_challenge_is_protocol_error(scripted_transport, make_client, respond, body):
    transport = scripted_transport(respond(402, body))

    with pytest.raises(ProtocolError):
        await make_client(transport).execute(RequestContext(url=URL))


# ========================================================================
# Scenario F: second 402 is final
# ========================================================================

@pytest.mark.asyncio
async def test_second_402_returned_unmodified(scripted_transport, make_client, respond, challenge_body):
    rejection = {"x402Version": 1, "error": "invalid signature", "accepts": []}
    transport = scripted_transport(respond(402, challenge_body()), respond(402, rejection))

    result = await make_client(transport).execute(RequestContext(url=URL))

    assert result.status_code == 402
    assert result.body == rejection
    assert result.payment is None
    assert "_x402Payment" not in result.to_item()
    assert len(transport.requests) == 2


# ========================================================================
# Network pre-selection
# ========================================================================

@pytest.mark.asyncio
async def test_preselected_network_mismatch(scripted_transport, spy_client, spy, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body()))

    with pytest.raises(NetworkMismatchError):
        await spy_client(transport).execute(RequestContext(url=URL, network="polygon"))
    assert spy.calls == []


@pytest.mark.asyncio
async def test_preselected_network_synonym_is_accepted(scripted_transport, make_client, respond, challenge_body):
    transport = scripted_transport(respond(402, challenge_body(network="matic")), respond(200, {}))

    result = await make_client(transport).execute(RequestContext(url=URL, network="polygon"))

    assert result.payment.chain_id == 137
    assert result.payment.network == "matic"


@pytest.mark.asyncio
async def test_transport_failure_propagates(make_client):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError):
        await make_client(httpx.MockTransport(handler)).execute(RequestContext(url=URL))


# ========================================================================
# Request options
# ========================================================================

def test_options_default_to_json_content_type_without_body():
    ctx = RequestOptions(url=URL, method="POST", json_body={"a": 1}).to_context()

    assert ctx.headers == {"Content-Type": "application/json"}
    assert ctx.body is None


def test_options_body_only_for_body_methods():
    for method in ("GET", "DELETE"):
        ctx = RequestOptions(url=URL, method=method, send_body=True, json_body={"a": 1}).to_context()
        assert ctx.body is None
    ctx = RequestOptions(url=URL, method="PATCH", send_body=True, json_body={"a": 1}).to_context()
    assert json.loads(ctx.body) == {"a": 1}


def test_options_raw_body_and_content_type():
    ctx = RequestOptions(
        url=URL,
        method="POST",
        send_body=True,
        content_type="application/x-www-form-urlencoded",
        raw_body="a=1&b=2",
    ).to_context()

    assert ctx.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert ctx.body == "a=1&b=2"


def test_options_custom_headers_skip_empty_names():
    ctx = RequestOptions(
        url=URL,
        send_headers=True,
        headers=[HeaderParameter(name="X-Api-Key", value="k"), HeaderParameter(name="", value="ignored")],
        max_payment_usd=0.25,
        network="base",
    ).to_context()

    assert ctx.headers == {"Content-Type": "application/json", "X-Api-Key": "k"}
    assert ctx.max_payment_usd == Decimal("0.25")
    assert ctx.network == "base"


@pytest.mark.asyncio
async def test_execute_accepts_request_options(scripted_transport, make_client, respond):
    transport = scripted_transport(respond(200, ["a", "b"]))

    result = await make_client(transport).execute(RequestOptions(url=URL, method="PUT", send_body=True, json_body="[1]"))

    assert result.to_item() == {"data": ["a", "b"]}
    assert transport.requests[0].method == "PUT"
    assert transport.requests[0].content == b"[1]"


# ========================================================================
# Batch execution
# ========================================================================

@pytest.mark.asyncio
async def test_batch_continue_on_fail_records_errors(scripted_transport, make_client, respond, challenge_body):
    transport = scripted_transport(
        respond(200, {"n": 0}),
        respond(402, challenge_body(accepts=[])),
        respond(200, {"n": 2}),
    )

    results = await make_client(transport).execute_batch(
        [RequestContext(url=f"{URL}/{i}") for i in range(3)],
        continue_on_fail=True,
    )

    assert results[0].body == {"n": 0}
    assert isinstance(results[1], ErrorRecord)
    assert results[1].item_index == 1
    assert results[1].to_item()["errorType"] == "no_offer"
    assert results[2].body == {"n": 2}


@pytest.mark.asyncio
async def test_batch_halts_on_first_failure(scripted_transport, make_client, respond, challenge_body):
    transport = scripted_transport(
        respond(402, challenge_body(maxAmountRequired="999999999")),
        respond(200, {}),
    )

    with pytest.raises(SpendCapExceededError):
        await make_client(transport).execute_batch(
            [RequestContext(url=f"{URL}/{i}") for i in range(2)],
            concurrency=2,
        )

    assert [str(request.url) for request in transport.requests] == [f"{URL}/0"]


@pytest.mark.asyncio
async def test_batch_concurrency_keeps_input_order(scripted_transport, make_client, respond):
    transport = scripted_transport(*[respond(200, {"ok": True}) for _ in range(5)])

    results = await make_client(transport).execute_batch(
        [RequestContext(url=f"{URL}/{i}") for i in range(5)],
        continue_on_fail=True,
        concurrency=3,
    )

    assert [r.status_code for r in results] == [200] * 5
    assert len(transport.requests) == 5


class SlowSigner(SpySigner):
    """Signer that waits before answering, like a remote signing service."""

    async def sign_typed_data(self, typed_data):
        await asyncio.sleep(0.3)
        return await super().sign_typed_data(typed_data)


@pytest.mark.asyncio
async def test_slow_signer_does_not_serialize_batch(signer, challenge_body, respond):
    def handler(request: httpx.Request) -> httpx.Response:
        if "X-PAYMENT" in request.headers:
            return respond(200, {"ok": True})
        return respond(402, challenge_body())

    slow = SlowSigner(signer)
    client = Http402Client(
        slow,
        dispatcher=RequestDispatcher(httpx.AsyncClient(transport=httpx.MockTransport(handler))),
    )

    started = time.monotonic()
    results = await client.execute_batch(
        [RequestContext(url=f"{URL}/{i}") for i in range(4)],
        continue_on_fail=True,
        concurrency=4,
    )
    elapsed = time.monotonic() - started

    assert all(result.paid for result in results)
    assert len(slow.calls) == 4
    assert elapsed < 0.9


# ========================================================================
# Construction from configuration
# ========================================================================

@pytest.mark.asyncio
async def test_from_settings_uses_derived_payer(wallet_seed, signer):
    async with Http402Client.from_settings(ClientSettings(wallet_seed=wallet_seed)) as client:
        assert client.payer == signer.address
