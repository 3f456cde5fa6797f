"""JSON backup and restore of every card and invoice.

Backup layout (version 1):

    {"version": 1, "timestamp": "...", "cards": [...], "invoices": [...]}

Restore replaces the stored cards and invoices wholesale.  Rows get fresh
ids in file order; ``supplier_card_number`` values are kept as written and
each supplier's counter is raised to the highest restored number so new
intakes continue the sequence.
"""

import json
import logging
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import FieldValidationError
from app.models.card import Card
from app.models.invoice import Invoice
from app.schemas.backup import BACKUP_VERSION, BackupDocument, RestoreSummary
from app.schemas.invoice import InvoiceOut
from app.services.cards import delete_all_cards
from app.services.invoices import delete_all_invoices
from app.utils.numbering import SupplierCounterStore, counter_key, get_counter_store

logger = logging.getLogger(__name__)

_INVOICE_EXCLUDE = {"id", "created_at", "updated_at"}


async def create_backup(db: AsyncSession) -> dict:
    """Serializable backup document of the whole store."""
    cards = (await db.execute(select(Card).order_by(Card.id.asc()))).scalars().all()
    invoices = (
        await db.execute(select(Invoice).order_by(Invoice.id.asc()))
    ).scalars().all()

    return {
        "version": BACKUP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "cards": [card.snapshot() for card in cards],
        "invoices": [
            InvoiceOut.model_validate(invoice).model_dump(mode="json")
            for invoice in invoices
        ],
    }


def parse_backup(raw: dict | str | bytes) -> BackupDocument:
    """Validate a backup document.  Raises FieldValidationError if malformed."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise FieldValidationError(f"Backup is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, dict):
        raise FieldValidationError("Backup must be a JSON object")

    try:
        document = BackupDocument.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise FieldValidationError(
            f"Invalid backup file: {field}: {first['msg']}", field=field
        ) from exc

    if document.version > BACKUP_VERSION:
        raise FieldValidationError(
            f"Unsupported backup version {document.version}", field="version"
        )
    return document


async def restore_backup(
    db: AsyncSession,
    raw: dict | str | bytes,
    counters: SupplierCounterStore | None = None,
) -> RestoreSummary:
    """Replace all cards and invoices with the contents of ``raw``."""
    document = parse_backup(raw)
    if counters is None:
        counters = await get_counter_store(db)

    await delete_all_invoices(db)
    await delete_all_cards(db)

    highest: dict[str, int] = {}
    for snapshot in document.cards:
        db.add(Card(**snapshot.model_dump(exclude={"id"})))
        if snapshot.supplier_card_number is not None:
            key = counter_key(snapshot.supplier_name)
            highest[key] = max(highest.get(key, 0), snapshot.supplier_card_number)

    for entry in document.invoices:
        data = entry.model_dump(mode="json", exclude=_INVOICE_EXCLUDE)
        data["date"] = entry.date
        db.add(Invoice(**data))

    await db.flush()

    for supplier_name, number in highest.items():
        await counters.ensure_at_least(supplier_name, number)

    logger.info(
        "Restored backup from %s: %d cards, %d invoices",
        document.timestamp.isoformat(), len(document.cards), len(document.invoices),
    )
    return RestoreSummary(cards=len(document.cards), invoices=len(document.invoices))
