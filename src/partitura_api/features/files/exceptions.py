"""Errors raised while validating uploaded files."""

from __future__ import annotations

from partitura_api.common.errors import ValidationError


class InvalidFileError(ValidationError):
    """Raised when an uploaded payload is rejected."""

    code = "invalid_file"


__all__ = ["InvalidFileError"]
