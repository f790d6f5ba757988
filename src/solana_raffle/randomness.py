"""
Randomness coordinators.

A coordinator accepts a RandomnessRequest, hands back an opaque request id,
and later delivers random words for that id to the consumer's callback.
How the words are produced (and proven) is the coordinator's business.
"""

from __future__ import annotations

import itertools
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .project_constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_KEY_HASH,
    DEFAULT_REQUEST_CONFIRMATIONS,
    NUM_WORDS,
)
from .rpc import RpcClient

log = logging.getLogger(__name__)

FulfillCallback = Callable[[int, Sequence[int]], None]


@dataclass(frozen=True)
class RandomnessRequest:
    key_hash: str = DEFAULT_KEY_HASH
    subscription_id: int = 0
    request_confirmations: int = DEFAULT_REQUEST_CONFIRMATIONS
    callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT
    num_words: int = NUM_WORDS
    extra_args: Dict[str, Any] = field(default_factory=lambda: {"nativePayment": False})


@runtime_checkable
class RandomnessCoordinator(Protocol):
    def request_random_words(self, request: RandomnessRequest) -> int:
        ...


class LocalCoordinator:
    """
    In-process coordinator for simulations and tests.

    Request ids start at 1 and increase. Nothing is delivered until
    fulfill() is called; a request whose callback raises stays pending
    and can be fulfilled again.
    """

    def __init__(
        self,
        callback: Optional[FulfillCallback] = None,
        history_limit: Optional[int] = 1000,
    ) -> None:
        self._callback = callback
        self._history_limit = history_limit
        self._ids = itertools.count(1)
        self.pending: Dict[int, RandomnessRequest] = {}
        self.requests: List[RandomnessRequest] = []

    def bind(self, callback: FulfillCallback) -> None:
        self._callback = callback

    def request_random_words(self, request: RandomnessRequest) -> int:
        request_id = next(self._ids)
        self.pending[request_id] = request
        self.requests.append(request)
        if self._history_limit is not None and len(self.requests) > self._history_limit:
            del self.requests[: -self._history_limit]
        log.debug("Registered request %d (%d words)", request_id, request.num_words)
        return request_id

    def fulfill(self, request_id: int, words: Optional[Sequence[int]] = None) -> List[int]:
        if self._callback is None:
            raise RuntimeError("No consumer bound to coordinator.")
        request = self.pending.get(request_id)
        if request is None:
            raise KeyError(f"Request {request_id} is not pending")
        if words is None:
            words = [secrets.randbits(256) for _ in range(request.num_words)]
        out = [int(w) for w in words]
        self._callback(request_id, out)
        del self.pending[request_id]
        return out


class RpcCoordinator:
    """Coordinator reached over JSON-RPC; words are fetched by polling."""

    def __init__(self, client: RpcClient) -> None:
        self.client = client

    def request_random_words(self, request: RandomnessRequest) -> int:
        return self.client.request_random_words(
            key_hash=request.key_hash,
            subscription_id=request.subscription_id,
            request_confirmations=request.request_confirmations,
            callback_gas_limit=request.callback_gas_limit,
            num_words=request.num_words,
            extra_args=request.extra_args,
        )

    def poll(self, request_id: int) -> Optional[List[int]]:
        """Returns the random words once the coordinator has them, else None."""
        status = self.client.get_request_status(request_id)
        if not status.get("fulfilled"):
            return None
        words = status.get("randomWords") or []
        return [int(w) for w in words]
