"""Pydantic schemas for Card intake, edit, search and weight preview."""

from datetime import date as date_type, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import PaginatedResponse
from app.services.calculations import DiscountMode

WEIGHT_DRIVER_FIELDS = ("discount_percentage", "discount_amount", "net_weight")

_DRIVER_MODES = {
    "discount_percentage": DiscountMode.BY_PERCENTAGE,
    "discount_amount": DiscountMode.BY_AMOUNT,
    "net_weight": DiscountMode.BY_NET_WEIGHT,
}


def _required_text(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


class _WeightDriverMixin(BaseModel):
    """At most one of the three discount fields may be sent per request."""

    @model_validator(mode="after")
    def single_weight_driver(self):
        sent = [f for f in WEIGHT_DRIVER_FIELDS if getattr(self, f) is not None]
        if len(sent) > 1:
            raise ValueError(
                "Provide only one of discount_percentage, discount_amount or net_weight"
            )
        return self

    def weight_driver(self) -> tuple[DiscountMode, float] | None:
        for f in WEIGHT_DRIVER_FIELDS:
            value = getattr(self, f)
            if value is not None:
                return _DRIVER_MODES[f], value
        return None


# ── Create ───────────────────────────────────────────────────

class CardCreate(_WeightDriverMixin):
    """Payload for POST /api/cards/ — the weigh-station intake form.

    ``gross_weight`` is required.  Send one of ``discount_percentage``,
    ``discount_amount`` or ``net_weight``; the other two are derived.
    Sending none means no discount.
    """
    date: date_type = Field(default_factory=date_type.today)
    farmer_name: str
    vehicle_number: str
    gross_weight: float = Field(..., ge=0)
    supplier_name: str = ""

    discount_percentage: float | None = Field(None, ge=0)
    discount_amount: float | None = Field(None, ge=0)
    net_weight: float | None = Field(None, ge=0)
    is_done: bool = False

    @field_validator("farmer_name")
    @classmethod
    def farmer_name_required(cls, v: str) -> str:
        return _required_text(v, "Farmer name")

    @field_validator("vehicle_number")
    @classmethod
    def vehicle_number_required(cls, v: str) -> str:
        return _required_text(v, "Vehicle number")

    @field_validator("supplier_name")
    @classmethod
    def strip_supplier(cls, v: str | None) -> str:
        return (v or "").strip()


# ── Update (partial) ─────────────────────────────────────────

class CardUpdate(_WeightDriverMixin):
    """Editable fields.  ``id`` and ``supplier_card_number`` never change."""
    date: date_type | None = None
    farmer_name: str | None = None
    supplier_name: str | None = None
    vehicle_number: str | None = None
    gross_weight: float | None = Field(None, ge=0)
    discount_percentage: float | None = Field(None, ge=0)
    discount_amount: float | None = Field(None, ge=0)
    net_weight: float | None = Field(None, ge=0)
    is_done: bool | None = None

    @field_validator("farmer_name")
    @classmethod
    def farmer_name_not_blank(cls, v: str | None) -> str | None:
        return None if v is None else _required_text(v, "Farmer name")

    @field_validator("vehicle_number")
    @classmethod
    def vehicle_number_not_blank(cls, v: str | None) -> str | None:
        return None if v is None else _required_text(v, "Vehicle number")

    @field_validator("supplier_name")
    @classmethod
    def strip_supplier(cls, v: str | None) -> str | None:
        return None if v is None else v.strip()


class CardDoneUpdate(BaseModel):
    is_done: bool


# ── Response ─────────────────────────────────────────────────

class CardOut(BaseModel):
    id: int
    supplier_card_number: int | None
    date: date_type
    farmer_name: str
    supplier_name: str
    vehicle_number: str
    gross_weight: float
    discount_percentage: float
    discount_amount: float
    net_weight: float
    is_done: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class CardListResponse(PaginatedResponse[CardOut]):
    """Card page plus weight totals over every card matching the filter."""
    total_gross_weight: float
    total_net_weight: float


# ── Weight preview (discount triangle) ──────────────────────

class WeightPreviewRequest(BaseModel):
    gross_weight: float = Field(..., ge=0)
    mode: DiscountMode
    value: float = Field(..., ge=0)


class WeightPreviewOut(BaseModel):
    gross_weight: float
    mode: DiscountMode
    discount_percentage: float | None
    discount_amount: float | None
    net_weight: float | None
    out_of_range: bool
