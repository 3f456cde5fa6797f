"""Aggregate model imports for Alembic auto-detection."""

from app.models.card import Card  # noqa: F401
from app.models.invoice import Invoice  # noqa: F401
from app.models.supplier_counter import SupplierCounter  # noqa: F401
