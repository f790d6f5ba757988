"""Tests for the in-memory custody ledger."""

import pytest

from solana_raffle.custody import CustodyLedger, ValueTransfer


class TestCustodyLedger:
    def test_fund_credits_raffle_account(self) -> None:
        ledger = CustodyLedger(account="pool")
        ledger.fund(5)
        ledger.fund(7)
        assert ledger.balance_of("pool") == 12

    def test_unknown_address_has_zero_balance(self) -> None:
        assert CustodyLedger().balance_of("nobody") == 0

    def test_transfer_moves_funds(self) -> None:
        ledger = CustodyLedger(account="pool")
        ledger.fund(10)
        assert ledger.transfer("alice", 10) is True
        assert ledger.balance_of("alice") == 10
        assert ledger.balance_of("pool") == 0

    def test_transfer_reports_overdraft_instead_of_raising(self) -> None:
        ledger = CustodyLedger(account="pool")
        ledger.fund(3)
        assert ledger.transfer("alice", 4) is False
        assert ledger.balance_of("pool") == 3
        assert ledger.balance_of("alice") == 0

    def test_negative_deposit_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            CustodyLedger().deposit("alice", -1)

    def test_satisfies_value_transfer_protocol(self) -> None:
        assert isinstance(CustodyLedger(), ValueTransfer)


class TestWholeLamports:
    @pytest.mark.parametrize("amount", [1.5, "3", False])
    def test_non_integer_deposit_rejected(self, amount) -> None:
        ledger = CustodyLedger(account="pool")
        with pytest.raises(TypeError, match="whole lamports"):
            ledger.fund(amount)
        assert ledger.balance_of("pool") == 0
