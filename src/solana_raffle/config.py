from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from .errors import ConfigError
from .project_constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_ENTRANCE_FEE,
    DEFAULT_INTERVAL_S,
    DEFAULT_KEY_HASH,
    DEFAULT_REQUEST_CONFIRMATIONS,
    NUM_WORDS,
)
from .randomness import RandomnessRequest

T = TypeVar("T")


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name}={raw!r} is not valid: {e}") from e


@dataclass(frozen=True)
class Settings:
    entrance_fee: int = DEFAULT_ENTRANCE_FEE
    interval_s: float = DEFAULT_INTERVAL_S
    coordinator_url: Optional[str] = None
    key_hash: str = DEFAULT_KEY_HASH
    subscription_id: int = 0
    request_confirmations: int = DEFAULT_REQUEST_CONFIRMATIONS
    callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT

    def __post_init__(self) -> None:
        if self.entrance_fee <= 0:
            raise ConfigError("Entrance fee must be a positive number of lamports.")
        if self.interval_s < 0:
            raise ConfigError("Interval must be non-negative.")
        if self.request_confirmations < 0 or self.callback_gas_limit <= 0:
            raise ConfigError("Invalid VRF confirmations / callback gas limit.")

    @staticmethod
    def from_env(coordinator_url_override: Optional[str] = None) -> "Settings":
        load_dotenv()

        # --rpc-url wins over the environment; no URL means the local coordinator.
        url = coordinator_url_override or os.getenv("VRF_COORDINATOR_URL", "").strip() or None

        return Settings(
            entrance_fee=_env("RAFFLE_ENTRANCE_FEE", DEFAULT_ENTRANCE_FEE, int),
            interval_s=_env("RAFFLE_INTERVAL_S", DEFAULT_INTERVAL_S, float),
            coordinator_url=url,
            key_hash=_env("VRF_KEY_HASH", DEFAULT_KEY_HASH, str),
            subscription_id=_env("VRF_SUBSCRIPTION_ID", 0, int),
            request_confirmations=_env(
                "VRF_REQUEST_CONFIRMATIONS", DEFAULT_REQUEST_CONFIRMATIONS, int
            ),
            callback_gas_limit=_env("VRF_CALLBACK_GAS_LIMIT", DEFAULT_CALLBACK_GAS_LIMIT, int),
        )

    def randomness_request(self) -> RandomnessRequest:
        return RandomnessRequest(
            key_hash=self.key_hash,
            subscription_id=self.subscription_id,
            request_confirmations=self.request_confirmations,
            callback_gas_limit=self.callback_gas_limit,
            num_words=NUM_WORDS,
        )
