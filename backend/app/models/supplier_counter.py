"""SupplierCounter — last supplier_card_number handed out per supplier.

Rows are only ever incremented (or raised on restore).  Deleting cards
does not touch this table, so numbers are never reused for a supplier.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class SupplierCounter(Base):
    __tablename__ = "supplier_counters"

    supplier_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    card_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
