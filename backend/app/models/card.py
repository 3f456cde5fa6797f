"""Card — a single weigh-station intake record.

A Card is created once at intake.  ``id`` and ``supplier_card_number`` are
fixed at creation; everything else (date, names, weights, done flag) may be
edited afterwards.  Invoices copy cards into their own JSON snapshot, so
deleting or editing a Card never changes a saved Invoice.
"""

from datetime import date as date_type, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Card(Base):
    __tablename__ = "cards"
    # Never hand out a deleted id again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Sequence within one supplier name, assigned by the counter store
    supplier_card_number: Mapped[int | None] = mapped_column(Integer, index=True)

    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    farmer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    supplier_name: Mapped[str] = mapped_column(String(255), default="", index=True)
    vehicle_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Weights (kg) ─────────────────────────────────────────
    gross_weight: Mapped[float] = mapped_column(Float, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, default=0.0)
    discount_amount: Mapped[float] = mapped_column(Float, default=0.0)
    net_weight: Mapped[float] = mapped_column(Float, nullable=False)

    is_done: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def snapshot(self) -> dict:
        """Plain-data copy of the card, as embedded in invoices and backups."""
        return {
            "id": self.id,
            "supplier_card_number": self.supplier_card_number,
            "date": self.date.isoformat() if self.date else None,
            "farmer_name": self.farmer_name,
            "supplier_name": self.supplier_name,
            "vehicle_number": self.vehicle_number,
            "gross_weight": self.gross_weight,
            "discount_percentage": self.discount_percentage,
            "discount_amount": self.discount_amount,
            "net_weight": self.net_weight,
            "is_done": bool(self.is_done),
        }
