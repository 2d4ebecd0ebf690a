"""Helpers for case-insensitive substring and equality predicates."""

from __future__ import annotations

from sqlalchemy import func, or_
from sqlalchemy.sql.elements import ColumnElement

LIKE_ESCAPE = "\\"


def normalize_q(q: str | None) -> str | None:
    """Collapse whitespace; blank input becomes ``None``."""
    if q is None:
        return None
    candidate = " ".join(q.strip().split())
    return candidate or None


def escape_like(token: str) -> str:
    return (
        token.replace(LIKE_ESCAPE, LIKE_ESCAPE + LIKE_ESCAPE)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def contains_predicate(column: ColumnElement[object], value: str) -> ColumnElement[bool]:
    """``column`` contains ``value``, ignoring case. Wildcards in ``value`` are literal."""
    pattern = f"%{escape_like(value)}%"
    return column.ilike(pattern, escape=LIKE_ESCAPE)


def any_contains_predicate(
    columns: tuple[ColumnElement[object], ...],
    value: str,
) -> ColumnElement[bool]:
    return or_(*(contains_predicate(column, value) for column in columns))


def equals_ignore_case(column: ColumnElement[object], value: str) -> ColumnElement[bool]:
    """Both sides are lowered by the database so they fold the same way."""
    return func.lower(column) == func.lower(value)


__all__ = [
    "LIKE_ESCAPE",
    "any_contains_predicate",
    "contains_predicate",
    "equals_ignore_case",
    "escape_like",
    "normalize_q",
]
