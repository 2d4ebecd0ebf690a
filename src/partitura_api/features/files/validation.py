"""Upload validation for sheet payloads."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from fastapi import UploadFile

from partitura_api.common.logging import log_context
from partitura_api.models import DEFAULT_PDF_CONTENT_TYPE
from partitura_api.settings import Settings

from .exceptions import InvalidFileError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "partitura.pdf"
PDF_MAGIC = b"%PDF"

_KB = 1024
_MB = 1024 * 1024


def format_file_size(size: int) -> str:
    """Render a byte count as megabytes when >= 1 MiB, otherwise kilobytes.

    Values are rounded to two decimals: ``format_file_size(1536) == "1.5 KB"``.
    """
    if size >= _MB:
        return f"{round(size / _MB, 2)} MB"
    return f"{round(size / _KB, 2)} KB"


def file_extension(filename: str | None) -> str:
    """Text after the last dot, lower-cased; empty when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


@dataclass(frozen=True, slots=True)
class ValidatedFile:
    """An accepted upload with defaults applied."""

    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


class FileValidator:
    """Checks emptiness, size, declared type, extension and the PDF signature.

    Checks run in that order and the first failure wins. Content types are
    compared exactly (parameters such as ``; charset=`` are ignored).
    """

    def __init__(
        self,
        *,
        max_bytes: int,
        allowed_content_types: Iterable[str],
        allowed_extensions: Iterable[str],
        sniff_magic_bytes: bool = True,
    ) -> None:
        self._max_bytes = max_bytes
        self._content_types = frozenset(allowed_content_types)
        self._extensions = frozenset(item.lower().lstrip(".") for item in allowed_extensions)
        self._sniff = sniff_magic_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> FileValidator:
        return cls(
            max_bytes=settings.upload_max_bytes,
            allowed_content_types=settings.upload_allowed_content_types,
            allowed_extensions=settings.upload_allowed_extensions,
            sniff_magic_bytes=settings.upload_sniff_magic_bytes,
        )

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def is_allowed_content_type(self, content_type: str | None) -> bool:
        return _strip_parameters(content_type) in self._content_types

    def validate(
        self,
        *,
        content: bytes,
        filename: str | None,
        content_type: str | None,
    ) -> ValidatedFile:
        if not content:
            raise InvalidFileError("File is empty.")

        if len(content) > self._max_bytes:
            raise InvalidFileError(
                f"File is too large. Maximum allowed: {format_file_size(self._max_bytes)} "
                f"(received: {format_file_size(len(content))})."
            )

        declared_type = _strip_parameters(content_type)
        if not self.is_allowed_content_type(declared_type):
            raise InvalidFileError(
                "File type not allowed. Accepted: "
                f"{', '.join(sorted(self._content_types))}. "
                f"Received: {declared_type or 'unknown'}."
            )

        extension = file_extension(filename)
        if extension not in self._extensions:
            raise InvalidFileError(
                f"File extension must be one of {', '.join(sorted(self._extensions))}. "
                f"Received: .{extension}"
            )

        if self._sniff:
            if len(content) < len(PDF_MAGIC):
                raise InvalidFileError("File is corrupt or too small.")
            if not content.startswith(PDF_MAGIC):
                raise InvalidFileError("File content is not a valid PDF document.")

        return ValidatedFile(
            content=content,
            filename=(filename or "").strip() or DEFAULT_FILENAME,
            content_type=declared_type or DEFAULT_PDF_CONTENT_TYPE,
        )

    async def validate_upload(self, upload: UploadFile) -> ValidatedFile:
        """Read ``upload`` (bounded by the size limit) and validate it."""
        # One byte past the limit is enough to prove the payload is too large.
        content = await upload.read(self._max_bytes + 1)
        try:
            return self.validate(
                content=content,
                filename=upload.filename,
                content_type=upload.content_type,
            )
        except InvalidFileError as exc:
            logger.warning(
                "files.validate.rejected",
                extra=log_context(upload_filename=upload.filename, reason=exc.message),
            )
            raise


def _strip_parameters(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip() or None


__all__ = [
    "DEFAULT_FILENAME",
    "FileValidator",
    "PDF_MAGIC",
    "ValidatedFile",
    "file_extension",
    "format_file_size",
]
