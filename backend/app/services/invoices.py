"""Invoice service.

An invoice freezes a copy of the cards it settles (saved cards by id, or
manual cards typed straight into the invoice form) and stores both the
clerk's pricing inputs and the derived breakdown from
``app.services.calculations``.

Payment state:
  - remaining_amount starts at max(0, final_amount)
  - is_paid is True exactly when remaining_amount == 0
  - editing an invoice recomputes everything and resets the payment state
"""

import logging
import math
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import (
    AmountRangeError,
    FieldValidationError,
    ResourceNotFoundError,
)
from app.models.card import Card
from app.models.invoice import Invoice
from app.schemas.card import CardCreate
from app.schemas.invoice import (
    CardSnapshot,
    InvoiceCreate,
    InvoicePreviewRequest,
    InvoiceTerms,
    InvoiceUpdate,
)
from app.services.calculations import InvoiceBreakdown, calculate_invoice
from app.services.cards import checked_triangle

logger = logging.getLogger(__name__)

TERM_FIELDS = tuple(InvoiceTerms.model_fields)


def _manual_snapshot(body: CardCreate) -> dict:
    percentage, amount, net = checked_triangle(
        body.gross_weight, body.weight_driver()
    ).resolve()
    snapshot = CardSnapshot(
        date=body.date,
        farmer_name=body.farmer_name,
        supplier_name=body.supplier_name,
        vehicle_number=body.vehicle_number,
        gross_weight=body.gross_weight,
        discount_percentage=percentage,
        discount_amount=amount,
        net_weight=net,
        is_done=body.is_done,
    )
    return snapshot.model_dump(mode="json")


async def collect_snapshots(
    db: AsyncSession,
    card_ids: list[int],
    manual_cards: list[CardCreate],
) -> list[dict]:
    """Snapshots of the saved cards (in request order) then the manual ones."""
    snapshots: list[dict] = []

    wanted = list(dict.fromkeys(card_ids))
    if wanted:
        result = await db.execute(select(Card).where(Card.id.in_(wanted)))
        by_id = {card.id: card for card in result.scalars().all()}
        missing = [str(i) for i in wanted if i not in by_id]
        if missing:
            raise ResourceNotFoundError("Card", ", ".join(missing))
        snapshots.extend(by_id[i].snapshot() for i in wanted)

    snapshots.extend(_manual_snapshot(card) for card in manual_cards)
    return snapshots


def total_net_weight(snapshots: list[dict]) -> float:
    return sum(s.get("net_weight") or 0 for s in snapshots)


def _breakdown(net_weight: float, terms: dict) -> InvoiceBreakdown:
    return calculate_invoice(
        net_weight, bag_weight=settings.seed_bag_weight_kg, **terms
    )


def _apply_breakdown(invoice: Invoice, breakdown: InvoiceBreakdown) -> None:
    for field, value in breakdown.as_dict().items():
        if field != "total_net_weight":
            setattr(invoice, field, value)
    invoice.remaining_amount = max(0, breakdown.final_amount)
    invoice.is_paid = invoice.remaining_amount == 0


def _terms_of(invoice: Invoice) -> dict:
    return {field: getattr(invoice, field) for field in TERM_FIELDS}


# ── Reads ────────────────────────────────────────────────────


async def get_invoice(db: AsyncSession, invoice_id: int) -> Invoice:
    invoice = await db.get(Invoice, invoice_id)
    if invoice is None:
        raise ResourceNotFoundError("Invoice", invoice_id)
    return invoice


async def list_invoices(
    db: AsyncSession, *, limit: int = 50, offset: int = 0,
) -> tuple[list[Invoice], int, float]:
    """Page of invoices (newest first), total count and summed net amount."""
    count, net_sum = (
        await db.execute(
            select(func.count(Invoice.id), func.coalesce(func.sum(Invoice.net_amount), 0))
        )
    ).one()
    result = await db.execute(
        select(Invoice).order_by(Invoice.id.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), count, float(net_sum)


async def preview_invoice(
    db: AsyncSession, body: InvoicePreviewRequest,
) -> InvoiceBreakdown:
    """Breakdown for unsaved inputs; nothing is written."""
    if body.card_ids or body.manual_cards:
        snapshots = await collect_snapshots(db, body.card_ids, body.manual_cards)
        net_weight = total_net_weight(snapshots)
    else:
        net_weight = body.total_net_weight or 0
    return _breakdown(net_weight, body.model_dump(include=set(TERM_FIELDS)))


# ── Writes ───────────────────────────────────────────────────


async def create_invoice(db: AsyncSession, body: InvoiceCreate) -> Invoice:
    snapshots = await collect_snapshots(db, body.card_ids, body.manual_cards)
    terms = body.model_dump(include=set(TERM_FIELDS))

    invoice = Invoice(
        date=body.date or date.today(),
        farmer_name=snapshots[0]["farmer_name"],
        cards=snapshots,
        **terms,
    )
    _apply_breakdown(invoice, _breakdown(total_net_weight(snapshots), terms))
    db.add(invoice)
    await db.flush()

    logger.info(
        "Created invoice %s for %r (%d cards), final %.0f",
        invoice.id, invoice.farmer_name, len(snapshots), invoice.final_amount,
    )
    return invoice


async def update_invoice(
    db: AsyncSession, invoice_id: int, body: InvoiceUpdate,
) -> Invoice:
    """Edit inputs and recompute.  remaining_amount restarts at the new final."""
    invoice = await get_invoice(db, invoice_id)
    changes = body.model_dump(exclude_none=True)

    if "date" in changes:
        invoice.date = changes.pop("date")
    if "farmer_name" in changes:
        invoice.farmer_name = changes.pop("farmer_name").strip() or invoice.farmer_name
    for field, value in changes.items():
        setattr(invoice, field, value)

    _apply_breakdown(
        invoice, _breakdown(total_net_weight(invoice.cards), _terms_of(invoice))
    )
    await db.flush()
    return invoice


async def update_payment(
    db: AsyncSession, invoice_id: int, remaining_amount: float,
) -> Invoice:
    """Record what is still owed.  Must be within [0, final_amount]."""
    invoice = await get_invoice(db, invoice_id)

    if remaining_amount is None or math.isnan(remaining_amount):
        raise FieldValidationError(
            "remaining_amount must be a number", field="remaining_amount"
        )
    if remaining_amount < 0 or remaining_amount > invoice.final_amount:
        raise AmountRangeError(
            "Remaining amount must be between 0 and the invoice final amount",
            minimum=0,
            maximum=invoice.final_amount,
        )

    invoice.remaining_amount = remaining_amount
    invoice.is_paid = remaining_amount == 0
    await db.flush()
    logger.info(
        "Invoice %s payment updated: remaining %s, paid=%s",
        invoice.id, remaining_amount, invoice.is_paid,
    )
    return invoice


async def delete_invoice(db: AsyncSession, invoice_id: int) -> None:
    invoice = await get_invoice(db, invoice_id)
    await db.delete(invoice)
    await db.flush()
    logger.info("Deleted invoice %s", invoice_id)


async def delete_all_invoices(db: AsyncSession) -> int:
    result = await db.execute(delete(Invoice))
    logger.info("Deleted all invoices (%s rows)", result.rowcount)
    return result.rowcount or 0
