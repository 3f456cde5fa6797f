"""Pydantic schemas for invoice creation, edit, payment and preview."""

from datetime import date as date_type, datetime

from pydantic import BaseModel, Field, model_validator

from app.schemas.card import CardCreate
from app.schemas.common import PaginatedResponse


class CardSnapshot(BaseModel):
    """A card as frozen into an invoice (or a backup file)."""
    id: int | None = None
    supplier_card_number: int | None = None
    date: date_type | None = None
    farmer_name: str
    supplier_name: str = ""
    vehicle_number: str = ""
    gross_weight: float = 0.0
    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    net_weight: float = 0.0
    is_done: bool = False


class InvoiceTerms(BaseModel):
    """Pricing inputs typed by the clerk."""
    contract_price: float = Field(0.0, ge=0)
    free_price: float = Field(0.0, ge=0)
    contract_quantity_per_bag: float = Field(0.0, ge=0)
    seed_bags: float = Field(0.0, ge=0)
    seed_bag_price: float = Field(0.0, ge=0)
    additional_seed_kilos: float = Field(0.0, ge=0)
    additional_deductions: float = Field(0.0, ge=0)


class _CardSource(BaseModel):
    card_ids: list[int] = []
    # Ad-hoc cards typed straight into the invoice; never saved as cards
    manual_cards: list[CardCreate] = []


# ── Create ───────────────────────────────────────────────────

class InvoiceCreate(InvoiceTerms, _CardSource):
    date: date_type | None = None

    @model_validator(mode="after")
    def cards_required(self):
        if not self.card_ids and not self.manual_cards:
            raise ValueError("Select at least one card for the invoice")
        return self


# ── Update (partial, recalculates everything) ───────────────

class InvoiceUpdate(BaseModel):
    date: date_type | None = None
    farmer_name: str | None = None
    contract_price: float | None = Field(None, ge=0)
    free_price: float | None = Field(None, ge=0)
    contract_quantity_per_bag: float | None = Field(None, ge=0)
    seed_bags: float | None = Field(None, ge=0)
    seed_bag_price: float | None = Field(None, ge=0)
    additional_seed_kilos: float | None = Field(None, ge=0)
    additional_deductions: float | None = Field(None, ge=0)


class PaymentUpdate(BaseModel):
    remaining_amount: float


# ── Preview ──────────────────────────────────────────────────

class InvoicePreviewRequest(InvoiceTerms, _CardSource):
    """Either cards (saved or manual) or a bare ``total_net_weight``."""
    total_net_weight: float | None = Field(None, ge=0)


class InvoiceBreakdownOut(BaseModel):
    total_net_weight: float
    total_contract_quantity: float
    free_quantity: float
    contract_amount: float
    free_amount: float
    seed_rights: float
    total_amount: float
    net_amount: float
    final_amount: float


# ── Response ─────────────────────────────────────────────────

class InvoiceOut(BaseModel):
    id: int
    date: date_type
    farmer_name: str
    cards: list[CardSnapshot]

    contract_price: float
    free_price: float
    contract_quantity_per_bag: float
    seed_bags: float
    seed_bag_price: float
    additional_seed_kilos: float
    additional_deductions: float

    total_contract_quantity: float
    free_quantity: float
    contract_amount: float
    free_amount: float
    seed_rights: float
    total_amount: float
    net_amount: float
    final_amount: float

    is_paid: bool
    remaining_amount: float
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class InvoiceListResponse(PaginatedResponse[InvoiceOut]):
    """Invoice page plus the summed net amount of all listed invoices."""
    total_net_amount: float
