"""Tests for ledger models and transfer request validation."""

from datetime import UTC, datetime

import pytest

from simplebank.domain.models import (
    Account,
    Entry,
    Transfer,
    TransferRequest,
    TransferResult,
    validate_transfer,
)

NOW = datetime(2024, 1, 1, tzinfo=UTC)


class TestValidateTransfer:
    def test_valid_request(self) -> None:
        req = TransferRequest(from_account_id=1, to_account_id=2, amount=30)
        assert validate_transfer(req) == []

    def test_negative_amount(self) -> None:
        req = TransferRequest(from_account_id=1, to_account_id=2, amount=-5)
        errors = validate_transfer(req)
        assert len(errors) == 1
        assert "positive" in errors[0]

    def test_zero_amount(self) -> None:
        req = TransferRequest(from_account_id=1, to_account_id=2, amount=0)
        assert validate_transfer(req)

    def test_self_transfer(self) -> None:
        req = TransferRequest(from_account_id=3, to_account_id=3, amount=10)
        errors = validate_transfer(req)
        assert errors == ["Cannot transfer from account 3 to itself"]

    def test_reports_every_violation(self) -> None:
        req = TransferRequest(from_account_id=3, to_account_id=3, amount=0)
        assert len(validate_transfer(req)) == 2


class TestModels:
    def test_account_frozen(self) -> None:
        account = Account(id=1, owner="alice", balance=100, currency="USD", created_at=NOW)
        with pytest.raises(Exception):
            account.balance = 0  # type: ignore[misc]

    def test_entry_from_mapping(self) -> None:
        entry = Entry.model_validate(
            {"id": 7, "account_id": 1, "amount": -30, "created_at": NOW}
        )
        assert entry.amount == -30

    def test_result_json_dump(self) -> None:
        a = Account(id=1, owner="a", balance=70, currency="USD", created_at=NOW)
        b = Account(id=2, owner="b", balance=80, currency="USD", created_at=NOW)
        result = TransferResult(
            transfer=Transfer(id=1, from_account_id=1, to_account_id=2, amount=30, created_at=NOW),
            from_account=a,
            to_account=b,
            from_entry=Entry(id=1, account_id=1, amount=-30, created_at=NOW),
            to_entry=Entry(id=2, account_id=2, amount=30, created_at=NOW),
        )
        dumped = result.model_dump(mode="json")
        assert dumped["transfer"]["amount"] == 30
        assert dumped["from_account"]["balance"] == 70
        assert dumped["from_entry"]["created_at"].startswith("2024-01-01")
