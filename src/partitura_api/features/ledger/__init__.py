"""Ownership and favorites ledger."""

from .resolver import OwnerResolver
from .service import RelationshipLedger

__all__ = ["OwnerResolver", "RelationshipLedger"]
