"""
HTTP 402 Payment Flow Client

Drives the x402 challenge/response sequence for one logical request:
dispatch, detect 402, parse, guard, sign, encode, re-dispatch once, and
merge payment metadata into the final result.
"""

import asyncio
from typing import Dict, List, Optional, Sequence, Union

from ..adapters.bases import TypedDataSigner
from ..adapters.evm.constants import DEFAULT_NETWORK_REGISTRY, NetworkRegistry
from ..adapters.evm.signatures import sign_payment_authorization
from ..config import ClientSettings, WalletCredential
from ..engine.challenges import parse_challenge, select_offer
from ..engine.exceptions import NetworkMismatchError
from ..engine.guards import SpendGuard, format_usd
from ..engine.reporter import ErrorRecord, capture
from ..schemas.https import (
    DispatchResponse,
    PaymentReceipt,
    PaymentResult,
    RequestContext,
    RequestOptions,
)
from ..schemas.versions import PAYMENT_HEADER, PAYMENT_REQUIRED_STATUS
from ..utils import logger
from .dispatcher import RequestDispatcher
from .headers import encode_payment_header

RequestInput = Union[RequestContext, RequestOptions]


class Http402Client:
    """
    x402 client with automatic 402 payment handling.

    The client:
    1. Sends the request
    2. On 402, parses the challenge and selects the first offer
    3. Resolves the offer network and enforces the spend cap
    4. Signs a payment authorization and encodes it as ``X-PAYMENT``
    5. Retries the original request once with the header merged in

    A second 402 is returned as-is: rejected payments are never retried and
    offers are never renegotiated.

    Usage:
        ```python
        async with Http402Client(derive_account(seed), timeout=30) as client:
            result = await client.execute(
                RequestContext(url="https://api.example.com/data", max_payment_usd=0.1)
            )
            print(result.to_item())
        ```
    """

    def __init__(
        self,
        signer: TypedDataSigner,
        *,
        payer: Optional[str] = None,
        registry: NetworkRegistry = DEFAULT_NETWORK_REGISTRY,
        dispatcher: Optional[RequestDispatcher] = None,
        spend_guard: Optional[SpendGuard] = None,
        **client_kwargs
    ):
        """
        Args:
            signer: Signing capability bound to the paying account.
            payer: Payer address reported to servers; defaults to ``signer.address``.
            registry: Network alias registry.
            dispatcher: Optional dispatcher; created from ``client_kwargs`` when None.
            spend_guard: Optional spend guard; defaults to a 6-decimal guard.
            **client_kwargs: httpx.AsyncClient arguments (timeout, transport, ...).
        """
        self._signer = signer
        self._payer = payer or signer.address
        self._registry = registry
        self._dispatcher = dispatcher or RequestDispatcher(**client_kwargs)
        self._guard = spend_guard or SpendGuard()

    @classmethod
    def from_credential(cls, credential: WalletCredential, **kwargs) -> "Http402Client":
        """Build a client from a wallet credential record."""
        signer, payer = credential.resolve()
        return cls(signer, payer=payer, **kwargs)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> "Http402Client":
        """Build a client from loaded settings; ``timeout`` defaults to the configured one."""
        kwargs.setdefault("timeout", settings.request_timeout)
        return cls.from_credential(settings.credential(), **kwargs)

    @property
    def payer(self) -> str:
        return self._payer

    # =========================================================================
    # Core 402 Handling Logic
    # =========================================================================

    async def execute(self, request: RequestInput) -> PaymentResult:
        """
        Execute one request with automatic 402 handling.

        Args:
            request: ``RequestContext`` or caller-facing ``RequestOptions``.

        Returns:
            PaymentResult: The first response when it is not a 402; otherwise
            the paid retry, with payment metadata unless it was challenged
            again.

        Raises:
            TransportError, ProtocolError, NoOfferError, UnsupportedNetworkError,
            SpendCapExceededError, SigningError
        """
        ctx = request.to_context() if isinstance(request, RequestOptions) else request

        response = await self._dispatcher.send(ctx.method, ctx.url, ctx.headers, ctx.body)
        if response.status_code != PAYMENT_REQUIRED_STATUS:
            return PaymentResult(
                status_code=response.status_code,
                headers=response.headers,
                body=response.body,
            )

        logger.info(f"402 Payment Required from {ctx.method} {ctx.url}")
        return await self._pay_and_retry(ctx, response)

    async def _pay_and_retry(self, ctx: RequestContext, response: DispatchResponse) -> PaymentResult:
        challenge = parse_challenge(response.body)
        offer = select_offer(challenge)
        network = self._registry.resolve(offer.network)

        if ctx.network:
            expected = self._registry.resolve(ctx.network)
            if expected.chain_id != network.chain_id:
                raise NetworkMismatchError(offer.network, ctx.network, self._registry.aliases())

        # Must hard-fail before anything is signed.
        amount_usd = self._guard.check(offer, ctx.max_payment_usd)

        authorization = await sign_payment_authorization(offer, network, self._signer, payer=self._payer)
        headers = self._inject_payment_header(
            ctx.headers, encode_payment_header(challenge, offer, authorization)
        )

        logger.info(
            f"Retrying {ctx.method} {ctx.url} with payment of ${format_usd(amount_usd)} "
            f"on {network.canonical_name}"
        )
        paid = await self._dispatcher.send(ctx.method, ctx.url, headers, ctx.body)

        if paid.status_code == PAYMENT_REQUIRED_STATUS:
            logger.warning(f"Payment for {ctx.url} was rejected; returning the second 402 unchanged")
            return PaymentResult(status_code=paid.status_code, headers=paid.headers, body=paid.body)

        receipt = PaymentReceipt(
            amount=format_usd(amount_usd),
            amount_raw=offer.max_amount_required,
            network=offer.network,
            chain_id=network.chain_id,
            asset=offer.asset,
            asset_name=authorization.asset_name,
            recipient=offer.pay_to,
            payer=authorization.payer,
            signature=authorization.signature,
        )
        return PaymentResult(
            status_code=paid.status_code,
            headers=paid.headers,
            body=paid.body,
            payment=receipt,
        )

    # =========================================================================
    # Batch execution
    # =========================================================================

    async def execute_batch(
        self,
        requests: Sequence[RequestInput],
        *,
        continue_on_fail: bool = False,
        concurrency: int = 1,
    ) -> List[Union[PaymentResult, ErrorRecord]]:
        """
        Execute independent requests.

        Args:
            requests: Items to execute.
            continue_on_fail: Record a failed item as ``ErrorRecord`` and carry
                on. Otherwise items run one after another and the first
                failure propagates; later items are never dispatched.
            concurrency: Maximum number of items in flight when
                ``continue_on_fail`` is set.

        Returns:
            One result per item, in input order.
        """
        if not continue_on_fail:
            results: List[Union[PaymentResult, ErrorRecord]] = []
            for request in requests:
                results.append(await self.execute(request))
            return results

        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def run(index: int, request: RequestInput) -> Union[PaymentResult, ErrorRecord]:
            async with semaphore:
                try:
                    return await self.execute(request)
                except Exception as exc:
                    return capture(index, exc)

        return list(await asyncio.gather(*(run(i, request) for i, request in enumerate(requests))))

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _inject_payment_header(self, headers: Dict[str, str], value: str) -> Dict[str, str]:
        """Return a copy of ``headers`` with the payment header set (case-insensitive replace)."""
        merged = {k: v for k, v in headers.items() if k.lower() != PAYMENT_HEADER.lower()}
        merged[PAYMENT_HEADER] = value
        return merged

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    async def __aenter__(self) -> "Http402Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
