"""
Abstract Base Classes for Signing Capabilities

Defines the narrow interface the payment flow uses to obtain signatures.
The flow never touches key material: it receives an object bound to one
account that can sign EIP-712 typed data, and nothing else.

Core Classes:
    - TypedDataSigner: "sign typed data" capability bound to one address
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class TypedDataSigner(ABC):
    """
    Abstract signing capability bound to a single account.

    Implementations may sign in-process (see ``LocalAccountSigner``) or
    forward the request to an external signer service, hardware wallet or
    MPC backend. Instances must be safe to share between concurrent request
    items: signing must not mutate shared state.

    Example Implementation:
        class RemoteSigner(TypedDataSigner):
            @property
            def address(self) -> str:
                return self._address

            async def sign_typed_data(self, typed_data):
                return await self._service.sign(typed_data)
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the account this capability signs for."""
        pass

    @abstractmethod
    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        """
        Sign EIP-712 structured data.

        A coroutine so that remote signers do not block the event loop.

        Args:
            typed_data: Full message in ``{types, primaryType, domain, message}``
                layout.

        Returns:
            str: 0x-prefixed 65-byte signature hex string.

        Raises:
            Any exception; callers translate it into ``SigningError``.
        """
        pass
