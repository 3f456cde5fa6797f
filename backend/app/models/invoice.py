"""Invoice — settlement document for one farmer.

Holds an immutable JSON copy of the cards it was built from, the pricing
inputs entered by the clerk, the derived monetary breakdown, and the
payment state.

Payment:  remaining_amount starts at final_amount; is_paid flips to True
exactly when remaining_amount reaches 0.
"""

from datetime import date as date_type, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    farmer_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # JSON array of card snapshots (see Card.snapshot)
    cards: Mapped[list] = mapped_column(JSON, default=list)

    # ── Inputs ───────────────────────────────────────────────
    contract_price: Mapped[float] = mapped_column(Float, default=0.0)
    free_price: Mapped[float] = mapped_column(Float, default=0.0)
    contract_quantity_per_bag: Mapped[float] = mapped_column(Float, default=0.0)
    seed_bags: Mapped[float] = mapped_column(Float, default=0.0)
    seed_bag_price: Mapped[float] = mapped_column(Float, default=0.0)
    additional_seed_kilos: Mapped[float] = mapped_column(Float, default=0.0)
    additional_deductions: Mapped[float] = mapped_column(Float, default=0.0)

    # ── Derived ──────────────────────────────────────────────
    total_contract_quantity: Mapped[float] = mapped_column(Float, default=0.0)
    free_quantity: Mapped[float] = mapped_column(Float, default=0.0)
    contract_amount: Mapped[float] = mapped_column(Float, default=0.0)
    free_amount: Mapped[float] = mapped_column(Float, default=0.0)
    seed_rights: Mapped[float] = mapped_column(Float, default=0.0)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0)
    net_amount: Mapped[float] = mapped_column(Float, default=0.0)
    final_amount: Mapped[float] = mapped_column(Float, default=0.0)

    # ── Payment ──────────────────────────────────────────────
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    remaining_amount: Mapped[float] = mapped_column(Float, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
