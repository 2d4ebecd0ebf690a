"""Tests for request payload models and the password policy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from partitura_api.features.sheets.schemas import SheetMetadata, SheetUpdate
from partitura_api.features.users.exceptions import InvalidPasswordError
from partitura_api.features.users.schemas import UserCreate
from partitura_api.features.users.service import check_password_policy


def test_sheet_update_only_reports_present_fields() -> None:
    assert SheetUpdate.model_validate({"title": "Nocturne"}).changes() == {"title": "Nocturne"}
    assert SheetUpdate.model_validate({}).changes() == {}


def test_sheet_update_null_clears_description_only() -> None:
    update = SheetUpdate.model_validate({"description": None, "artist": None, "is_public": False})
    assert update.changes() == {"description": None, "is_public": False}


def test_sheet_update_rejects_blank_title() -> None:
    with pytest.raises(ValidationError):
        SheetUpdate.model_validate({"title": ""})


def test_sheet_metadata_defaults_to_private() -> None:
    metadata = SheetMetadata(
        title="Etude", artist="Chopin", genre="Classical", instrument="Piano", owner_id=1
    )
    assert metadata.is_public is False
    assert metadata.description is None


def test_user_create_requires_valid_email() -> None:
    with pytest.raises(ValidationError):
        UserCreate(name="Clara", email="not-an-email", password="Secret123")


@pytest.mark.parametrize(
    ("password", "fragment"),
    [
        ("Ab1", "at least 8"),
        ("Abcdefgh", "digit"),
        ("ABCDEFG1", "lowercase"),
        ("abcdefg1", "uppercase"),
    ],
)
def test_password_policy_rejections(password: str, fragment: str) -> None:
    with pytest.raises(InvalidPasswordError, match=fragment):
        check_password_policy(password)


def test_password_policy_accepts_strong_password() -> None:
    check_password_policy("Secret123")
