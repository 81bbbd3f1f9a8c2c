"""BaseService, the foundation for all simplebank services.

Every service receives a :class:`Store` at construction time. Services never
open transactions themselves; multi-statement work goes through
:meth:`Store.execute` or :meth:`Store.transfer_tx`.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

from simplebank.domain.errors import BankError, RollbackError
from simplebank.services.result import ServiceError, ServiceResult
from simplebank.telemetry import root_span, telemetry_enabled

if TYPE_CHECKING:
    from simplebank.infrastructure.store import Store

logger = logging.getLogger(__name__)

_S = TypeVar("_S", bound="BaseService")
_P = ParamSpec("_P")


def traced(
    method: Callable[Concatenate[_S, _P], ServiceResult],
) -> Callable[Concatenate[_S, _P], ServiceResult]:
    """Time a service method and attach its span tree as ``meta["telemetry"]``.

    Steps the store runs under :func:`simplebank.telemetry.trace_span`
    become children of the method's span. A no-op unless telemetry is on.
    """

    @functools.wraps(method)
    def wrapper(self: _S, /, *args: _P.args, **kwargs: _P.kwargs) -> ServiceResult:
        if not telemetry_enabled():
            return method(self, *args, **kwargs)
        with root_span(method.__qualname__) as span:
            result = method(self, *args, **kwargs)
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})

    return wrapper


class BaseService:
    """Base for service-layer classes.

    Usage::

        class AccountService(BaseService):
            def get(self, account_id: int) -> ServiceResult:
                try:
                    account = self._store.queries.get_account(account_id)
                except BankError as exc:
                    return self._failure("get_account", exc)
                ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    @staticmethod
    def _failure(
        op: str,
        exc: BankError,
        *,
        detail: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Build a failed ServiceResult from a ledger error."""
        merged: dict[str, Any] = {"retryable": exc.retryable, **(detail or {})}
        if isinstance(exc, RollbackError):
            merged["error"] = str(exc.error)
            merged["rollback_error"] = str(exc.rollback_error)
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=str(exc), detail=merged),
            meta=meta,
        )
