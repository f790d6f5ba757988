from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Protocol, runtime_checkable

from .project_constants import RAFFLE_ACCOUNT

log = logging.getLogger(__name__)


@runtime_checkable
class ValueTransfer(Protocol):
    """
    Payout primitive used by the raffle.

    transfer() moves `amount` lamports out of the raffle account and
    reports success; it must return False instead of raising so the
    caller can roll back.
    """

    def transfer(self, to: str, amount: int) -> bool:
        ...


class CustodyLedger:
    """
    In-memory lamport balances, one of which is the raffle account.

    The raffle never stores its pot: it asks the ledger for the balance of
    `account`. Anything credited to that account (entries or `fund`) is
    paid out to the next winner.
    """

    def __init__(self, account: str = RAFFLE_ACCOUNT) -> None:
        self.account = account
        self._balances: Dict[str, int] = defaultdict(int)

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def deposit(self, address: str, amount: int) -> None:
        """Credit any address."""
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"Amount must be whole lamports, got {amount!r}")
        if amount < 0:
            raise ValueError("Deposit amount must be non-negative")
        self._balances[address] += int(amount)

    def fund(self, amount: int) -> None:
        """Credit the raffle account. Entry fees and side-channel funding both land here."""
        self.deposit(self.account, amount)

    def transfer(self, to: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(self.account) < amount:
            log.error(
                "Transfer of %d to %s rejected: raffle holds %d",
                amount, to, self.balance_of(self.account),
            )
            return False
        self._balances[self.account] -= int(amount)
        self._balances[to] += int(amount)
        return True
