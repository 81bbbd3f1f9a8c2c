"""Tests for BaseService and the error-to-result mapping."""

import pytest

from simplebank.domain.errors import (
    BankError,
    ConflictError,
    NotFoundError,
    RollbackError,
    ValidationError,
)
from simplebank.infrastructure.store import Store
from simplebank.services.accounts import AccountService
from simplebank.services.base import BaseService, traced
from simplebank.services.result import ServiceError, ServiceResult
from simplebank.services.transfer import TransferService
from simplebank.telemetry import enable_telemetry, trace_span


class TestBaseService:
    def test_store_injected(self, store: Store) -> None:
        assert BaseService(store)._store is store

    @pytest.mark.parametrize("service_cls", [AccountService, TransferService])
    def test_services_inherit_base(self, service_cls: type, store: Store) -> None:
        assert issubclass(service_cls, BaseService)
        assert service_cls(store)._store is store


class TestFailure:
    def test_maps_code_and_message(self) -> None:
        result = BaseService._failure("get_account", NotFoundError("No account found with ID: 3"))
        assert result.ok is False
        assert result.op == "get_account"
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.message == "No account found with ID: 3"
        assert result.error.detail == {"retryable": False}

    def test_retryable_flag(self) -> None:
        result = BaseService._failure("transfer", ConflictError("deadlock"))
        assert result.error is not None
        assert result.error.detail["retryable"] is True

    def test_rollback_error_detail(self) -> None:
        exc = RollbackError(ValidationError("bad"), RuntimeError("lost"))
        result = BaseService._failure("transfer", exc)
        assert result.error is not None
        assert result.error.code == "ROLLBACK_FAILED"
        assert result.error.detail["error"] == "bad"
        assert result.error.detail["rollback_error"] == "lost"

    def test_extra_detail_and_meta(self) -> None:
        result = BaseService._failure(
            "transfer", BankError("x"), detail={"account_id": 4}, meta={"attempts": 2}
        )
        assert result.error is not None
        assert result.error.detail["account_id"] == 4
        assert result.meta == {"attempts": 2}


class _Timed(BaseService):
    @traced
    def ok(self, *, attempts: int = 1) -> ServiceResult:
        with trace_span("create_transfer"):
            pass
        return ServiceResult(ok=True, op="ok", meta={"attempts": attempts})

    @traced
    def failing(self) -> ServiceResult:
        return ServiceResult(ok=False, op="failing", error=ServiceError(code="X", message="x"))

    @traced
    def raising(self) -> ServiceResult:
        raise ValueError("boom")


class TestTraced:
    def test_noop_when_disabled(self, store: Store) -> None:
        assert _Timed(store).ok().meta == {"attempts": 1}

    def test_injects_span_tree(self, store: Store) -> None:
        enable_telemetry()
        meta = _Timed(store).ok(attempts=2).meta
        assert meta is not None
        assert meta["attempts"] == 2
        assert meta["telemetry"]["name"] == "_Timed.ok"
        assert meta["telemetry"]["children"][0]["name"] == "create_transfer"

    def test_failed_result_gets_telemetry(self, store: Store) -> None:
        enable_telemetry()
        meta = _Timed(store).failing().meta
        assert meta is not None
        assert "telemetry" in meta

    def test_exception_propagates(self, store: Store) -> None:
        enable_telemetry()
        with pytest.raises(ValueError, match="boom"):
            _Timed(store).raising()
