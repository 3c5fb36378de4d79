"""Solana JSON-RPC client (read-only subset)."""

import itertools
import logging
from typing import Any, Optional

import httpx

from gasboard.core.exceptions import RateLimitedError, TransportError
from gasboard.domain.models import TransactionRecord
from gasboard.providers.schemas import RpcEnvelope, SignatureInfo, TransactionResponse

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS_CODES = frozenset({429})
# Some RPC hosts report throttling inside a 200 JSON-RPC body
RATE_LIMIT_RPC_CODES = frozenset({429, -32429})

GET_TRANSACTION_OPTIONS = {
    "encoding": "jsonParsed",
    "maxSupportedTransactionVersion": 0,
}


class SolanaRpcClient:
    """
    Minimal async JSON-RPC client for Solana.

    The httpx.AsyncClient is injected and owned by the caller. Every call is
    a single attempt; retry and timeout policy live with the caller.
    Responses are validated and converted to typed records here, so nothing
    downstream touches raw JSON.
    """

    def __init__(self, http: httpx.AsyncClient, rpc_url: str):
        self._http = http
        self._rpc_url = rpc_url
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._http.post(self._rpc_url, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{method} request failed: {exc}") from exc

        if response.status_code in RATE_LIMIT_STATUS_CODES:
            raise RateLimitedError(f"{method} rate limited (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise TransportError(f"{method} failed: HTTP {response.status_code}")

        try:
            envelope = RpcEnvelope.model_validate(response.json())
        except ValueError as exc:
            raise TransportError(f"{method} returned malformed payload: {exc}") from exc

        if envelope.error is not None:
            if envelope.error.code in RATE_LIMIT_RPC_CODES:
                raise RateLimitedError(f"{method} rate limited: {envelope.error.message}")
            raise TransportError(f"{method} RPC error {envelope.error.code}: {envelope.error.message}")
        return envelope.result

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 1000,
        before: Optional[str] = None,
    ) -> list[SignatureInfo]:
        """One page of signatures, newest first."""
        options: dict[str, Any] = {"limit": limit}
        if before:
            options["before"] = before
        result = await self._call("getSignaturesForAddress", [address, options])
        if result is None:
            return []
        if not isinstance(result, list):
            raise TransportError("getSignaturesForAddress returned a non-list result")
        try:
            return [SignatureInfo.model_validate(item) for item in result]
        except ValueError as exc:
            raise TransportError(f"getSignaturesForAddress returned malformed items: {exc}") from exc

    async def get_transaction(self, signature: str) -> Optional[TransactionRecord]:
        """
        Fetch one transaction body.

        Returns None when the node has no body (or no meta) for the signature.
        """
        result = await self._call("getTransaction", [signature, GET_TRANSACTION_OPTIONS])
        if result is None:
            return None
        try:
            tx = TransactionResponse.model_validate(result)
        except ValueError as exc:
            raise TransportError(f"getTransaction returned malformed body: {exc}") from exc
        if tx.meta is None:
            logger.debug("Transaction %s has no meta", signature)
            return None
        return TransactionRecord(
            signature=signature,
            block_time=tx.block_time,
            fee_lamports=tx.meta.fee,
            succeeded=tx.meta.err is None,
        )
