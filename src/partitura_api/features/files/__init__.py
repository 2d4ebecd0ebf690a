"""Upload validation collaborator."""

from .exceptions import InvalidFileError
from .validation import FileValidator, ValidatedFile, format_file_size

__all__ = ["FileValidator", "InvalidFileError", "ValidatedFile", "format_file_size"]
