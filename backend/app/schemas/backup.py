"""Backup file layout (version 1)."""

from datetime import date as date_type, datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.card import _required_text
from app.schemas.invoice import CardSnapshot, InvoiceOut

BACKUP_VERSION = 1


class BackupCard(CardSnapshot):
    """A stored card as written to a backup.

    Restored rows become real cards, so the intake form's required fields
    must be present; nothing is filled in on the way back.
    """
    date: date_type
    farmer_name: str
    vehicle_number: str
    gross_weight: float = Field(..., ge=0)

    @field_validator("farmer_name")
    @classmethod
    def farmer_name_required(cls, v: str) -> str:
        return _required_text(v, "Farmer name")

    @field_validator("vehicle_number")
    @classmethod
    def vehicle_number_required(cls, v: str) -> str:
        return _required_text(v, "Vehicle number")


class BackupInvoice(InvoiceOut):
    """Invoice row as written to a backup; timestamps are optional."""


class BackupDocument(BaseModel):
    version: int = Field(..., ge=1)
    timestamp: datetime
    cards: list[BackupCard]
    invoices: list[BackupInvoice]


class RestoreSummary(BaseModel):
    cards: int
    invoices: int
