from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import sqlite

from partitura_api.common.search import (
    contains_predicate,
    equals_ignore_case,
    escape_like,
    normalize_q,
)
from partitura_api.features.sheets.filters import SheetSearchCriteria, apply_sheet_criteria
from partitura_api.models import Sheet


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("", None), ("   ", None), ("  moon   light ", "moon light")],
)
def test_normalize_q(raw: str | None, expected: str | None) -> None:
    assert normalize_q(raw) == expected


def test_escape_like_treats_wildcards_literally() -> None:
    assert escape_like("100%_done\\") == "100\\%\\_done\\\\"


def test_contains_predicate_is_case_insensitive_like() -> None:
    compiled = str(
        contains_predicate(Sheet.artist, "bach").compile(
            dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}
        )
    )
    assert "lower(sheets.artist) LIKE lower('%bach%')" in compiled


def test_equals_ignore_case_lowers_both_sides_in_sql() -> None:
    compiled = str(
        equals_ignore_case(Sheet.genre, "Clásica").compile(
            dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}
        )
    )
    assert compiled == "lower(sheets.genre) = lower('Clásica')"


def test_criteria_blank_values_are_ignored() -> None:
    criteria = SheetSearchCriteria(text="  ", artist=None, genre="", instrument=None)
    assert criteria.is_empty()
    assert not SheetSearchCriteria(genre="Jazz").is_empty()


def test_apply_criteria_filters_public_by_default() -> None:
    stmt = apply_sheet_criteria(select(Sheet), SheetSearchCriteria(genre="Jazz"))
    compiled = str(stmt.compile(dialect=sqlite.dialect()))

    assert "sheets.is_public IS" in compiled
    assert "lower(sheets.genre)" in compiled
