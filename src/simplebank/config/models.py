"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, simplebank.toml only contains
overrides. An empty file (or none at all) gives a working SQLite ledger.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

ISOLATION_LEVELS = frozenset(
    {"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"}
)


def normalize_isolation_level(value: str | None) -> str | None:
    """Upper-case and check an isolation level name; None means store default."""
    if value is None:
        return None
    level = " ".join(value.replace("_", " ").split()).upper()
    if level not in ISOLATION_LEVELS:
        msg = f"Unknown isolation level {value!r}. Expected one of {sorted(ISOLATION_LEVELS)}"
        raise ValueError(msg)
    return level


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str | None = None  # None -> {root}/.simplebank/simplebank.db
    isolation_level: str | None = None
    busy_timeout: float = Field(default=5.0, gt=0)
    echo: bool = False

    @field_validator("isolation_level")
    @classmethod
    def _check_isolation_level(cls, value: str | None) -> str | None:
        return normalize_isolation_level(value)


class TransferConfig(BaseModel):
    """[transfer] section."""

    model_config = {"frozen": True}

    timeout: float | None = Field(default=None, gt=0)
    max_attempts: int = Field(default=1, ge=1)
