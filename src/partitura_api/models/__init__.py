"""Central exports for Partitura SQLAlchemy models."""

from .sheet import DEFAULT_PDF_CONTENT_TYPE, Sheet
from .user import User, canonical_email
from .user_sheet import UserSheet

__all__ = [
    "DEFAULT_PDF_CONTENT_TYPE",
    "Sheet",
    "User",
    "UserSheet",
    "canonical_email",
]
