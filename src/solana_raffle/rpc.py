from __future__ import annotations

import itertools
from typing import Any, Dict, List, Optional

import httpx

from .errors import RpcError


class RpcClient:
    """JSON-RPC 2.0 client for a remote VRF coordinator."""

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._ids = itertools.count(1)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RpcError(data["error"])
        return data

    def call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        return self._post(payload).get("result")

    def request_random_words(
        self,
        key_hash: str,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
        extra_args: Dict[str, Any],
    ) -> int:
        """Registers a request with the coordinator. Returns its request id."""
        result = self.call(
            "requestRandomWords",
            [
                {
                    "keyHash": key_hash,
                    "subId": subscription_id,
                    "requestConfirmations": request_confirmations,
                    "callbackGasLimit": callback_gas_limit,
                    "numWords": num_words,
                    "extraArgs": extra_args,
                }
            ],
        )
        if result is None:
            raise RpcError("requestRandomWords returned no request id")
        return int(result)

    def get_request_status(self, request_id: int) -> Dict[str, Any]:
        """
        Returns the coordinator's view of a request:
        {"fulfilled": bool, "randomWords": [...]} once available.
        """
        result = self.call("getRequestStatus", [request_id])
        if not isinstance(result, dict):
            raise RpcError(f"Request {request_id}: getRequestStatus returned {result!r}")
        return result
