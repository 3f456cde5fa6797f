"""Card intake service.

Handles the lifecycle of a weigh-station card:
  - Creating a card: resolving the discount triangle from the single weight
    driver and assigning the next per-supplier card number
  - Editing a card (identity fields stay fixed) and toggling its done flag
  - Deleting one card or all of them (supplier counters are left alone)
  - Listing by supplier with weight totals, and searching stored cards
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import FieldValidationError, ResourceNotFoundError
from app.models.card import Card
from app.schemas.card import CardCreate, CardUpdate
from app.services.calculations import DiscountMode, DiscountTriangle, resolve_card_weights
from app.services.card_search import search_cards, suggest_names
from app.utils.numbering import SupplierCounterStore, get_counter_store

logger = logging.getLogger(__name__)

# Suppliers offered by the intake screens.  Card.supplier_name stays free
# text; this list only feeds drop-downs and filters.
KNOWN_SUPPLIERS = (
    "جمعه الفخراني اهرام",
    "فوكس السيد معتوه",
    "بكر صقر",
    "محمد سلامه اهرام",
    "محمود فريد",
    "ثلاجه فلاحين",
    "من الارض للثلاجه",
)


def checked_triangle(
    gross_weight: float,
    driver: tuple[DiscountMode, float] | None,
) -> DiscountTriangle:
    if driver is None:
        return resolve_card_weights(gross_weight)
    mode, value = driver
    triangle = resolve_card_weights(gross_weight, mode, value)
    if triangle.out_of_range:
        field = "net_weight" if mode is DiscountMode.BY_NET_WEIGHT else "discount_amount"
        raise FieldValidationError(
            f"{field} must be between 0 and the gross weight ({gross_weight:g} kg)",
            field=field,
        )
    return triangle


def card_totals(cards: Iterable) -> dict:
    """Summed gross and net weight of ``cards``; blanks count as 0."""
    totals = {"count": 0, "gross_weight": 0.0, "net_weight": 0.0}
    for card in cards:
        totals["count"] += 1
        totals["gross_weight"] += card.gross_weight or 0
        totals["net_weight"] += card.net_weight or 0
    return totals


# ── Reads ────────────────────────────────────────────────────


async def get_card(db: AsyncSession, card_id: int) -> Card:
    card = await db.get(Card, card_id)
    if card is None:
        raise ResourceNotFoundError("Card", card_id)
    return card


async def list_cards(db: AsyncSession, supplier: str | None = None) -> list[Card]:
    """All cards, id ascending, optionally for one supplier name.

    Supplier matching is exact after trimming and lower-casing both sides.
    """
    stmt = select(Card).order_by(Card.id.asc())
    if supplier and supplier.strip():
        stmt = stmt.where(
            func.lower(func.trim(Card.supplier_name)) == supplier.strip().lower()
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def search_stored_cards(
    db: AsyncSession,
    query: str | None,
    date_filter: date | None = None,
) -> list[Card]:
    """Load every card and run the in-memory search over them."""
    cards = await list_cards(db)
    return search_cards(cards, query, date_filter)


async def suggest_stored_names(db: AsyncSession, query: str | None) -> list[str]:
    cards = await list_cards(db)
    return suggest_names(cards, query)


# ── Writes ───────────────────────────────────────────────────


async def create_card(
    db: AsyncSession,
    body: CardCreate,
    counters: SupplierCounterStore | None = None,
) -> Card:
    """Create a card and hand it the next number for its supplier."""
    triangle = checked_triangle(body.gross_weight, body.weight_driver())
    percentage, amount, net = triangle.resolve()

    if counters is None:
        counters = await get_counter_store(db)
    supplier_card_number = await counters.next_number(body.supplier_name)

    card = Card(
        supplier_card_number=supplier_card_number,
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
    db.add(card)
    await db.flush()  # populate card.id

    logger.info(
        "Created card %s (supplier %r #%s), net %.0f kg",
        card.id, card.supplier_name, supplier_card_number, net,
    )
    return card


async def update_card(db: AsyncSession, card_id: int, body: CardUpdate) -> Card:
    """Apply an edit.  Weights are re-derived when gross or a driver changes.

    A new gross weight without a new driver keeps the stored percentage as
    the driver, the way the edit form recalculates.
    """
    card = await get_card(db, card_id)

    for field in ("date", "farmer_name", "supplier_name", "vehicle_number", "is_done"):
        value = getattr(body, field)
        if value is not None:
            setattr(card, field, value)

    driver = body.weight_driver()
    if driver is not None or body.gross_weight is not None:
        gross = body.gross_weight if body.gross_weight is not None else card.gross_weight
        if driver is None:
            driver = (DiscountMode.BY_PERCENTAGE, card.discount_percentage)
        triangle = checked_triangle(gross, driver)
        percentage, amount, net = triangle.resolve()
        card.gross_weight = gross
        card.discount_percentage = percentage
        card.discount_amount = amount
        card.net_weight = net

    await db.flush()
    return card


async def set_card_done(db: AsyncSession, card_id: int, is_done: bool) -> Card:
    card = await get_card(db, card_id)
    card.is_done = is_done
    await db.flush()
    return card


async def delete_card(db: AsyncSession, card_id: int) -> None:
    card = await get_card(db, card_id)
    await db.delete(card)
    await db.flush()
    logger.info("Deleted card %s", card_id)


async def delete_all_cards(db: AsyncSession) -> int:
    """Remove every card.  Supplier counters and invoices are untouched."""
    result = await db.execute(delete(Card))
    logger.info("Deleted all cards (%s rows)", result.rowcount)
    return result.rowcount or 0
