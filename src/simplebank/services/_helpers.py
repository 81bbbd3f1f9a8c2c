"""Shared helpers for service modules."""

from __future__ import annotations

from simplebank.domain.errors import ValidationError


def check_page(limit: int, offset: int) -> None:
    """Reject a non-positive *limit* or a negative *offset*."""
    if limit <= 0:
        raise ValidationError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValidationError(f"offset must not be negative, got {offset}")
