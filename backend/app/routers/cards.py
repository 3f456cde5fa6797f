"""Card router — weigh-station intake, search and edit.

Endpoints:
    GET    /api/cards/                  List cards (optional supplier filter)
    GET    /api/cards/search            Search by number or Arabic name
    GET    /api/cards/suggestions       Name suggestions for the search box
    GET    /api/cards/suppliers         Known supplier names
    POST   /api/cards/weights/preview   Resolve discount fields without saving
    POST   /api/cards/                  Create card (assigns supplier number)
    DELETE /api/cards/                  Delete every card
    GET    /api/cards/{card_id}         Single card
    PATCH  /api/cards/{card_id}         Edit card
    PATCH  /api/cards/{card_id}/done    Toggle done flag
    DELETE /api/cards/{card_id}         Delete card
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.card import (
    CardCreate,
    CardDoneUpdate,
    CardListResponse,
    CardOut,
    CardUpdate,
    WeightPreviewOut,
    WeightPreviewRequest,
)
from app.services import cards as card_service
from app.services.calculations import resolve_card_weights

router = APIRouter()


# ── List / search ────────────────────────────────────────────

@router.get("/", response_model=CardListResponse)
async def list_cards(
    supplier: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Cards in id order.  Totals cover every card matching the filter."""
    cards = await card_service.list_cards(db, supplier=supplier)
    totals = card_service.card_totals(cards)
    page = cards[offset:offset + limit]

    return CardListResponse(
        items=[CardOut.model_validate(c) for c in page],
        total=totals["count"],
        limit=limit,
        offset=offset,
        total_gross_weight=totals["gross_weight"],
        total_net_weight=totals["net_weight"],
    )


@router.get("/search", response_model=list[CardOut])
async def search_cards(
    q: str | None = Query(None),
    card_date: date | None = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """A whole number matches id, supplier number or vehicle; otherwise names."""
    results = await card_service.search_stored_cards(db, q, card_date)
    return [CardOut.model_validate(c) for c in results]


@router.get("/suggestions", response_model=list[str])
async def name_suggestions(
    q: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.suggest_stored_names(db, q)


@router.get("/suppliers", response_model=list[str])
async def known_suppliers():
    return list(card_service.KNOWN_SUPPLIERS)


@router.post("/weights/preview", response_model=WeightPreviewOut)
async def preview_weights(body: WeightPreviewRequest):
    """Derived discount fields for one driver, as the intake form shows them."""
    triangle = resolve_card_weights(body.gross_weight, body.mode, body.value)
    return WeightPreviewOut(
        gross_weight=triangle.gross_weight,
        mode=triangle.mode,
        discount_percentage=triangle.discount_percentage,
        discount_amount=triangle.discount_amount,
        net_weight=triangle.net_weight,
        out_of_range=triangle.out_of_range,
    )


# ── Create / bulk delete ─────────────────────────────────────

@router.post("/", response_model=CardOut, status_code=status.HTTP_201_CREATED)
async def create_card(
    body: CardCreate,
    db: AsyncSession = Depends(get_db),
):
    card = await card_service.create_card(db, body)
    return CardOut.model_validate(card)


@router.delete("/")
async def delete_all_cards(db: AsyncSession = Depends(get_db)):
    """Remove every card.  Supplier numbering carries on where it was."""
    deleted = await card_service.delete_all_cards(db)
    return {"deleted": deleted}


# ── Single card ──────────────────────────────────────────────

@router.get("/{card_id}", response_model=CardOut)
async def get_card(card_id: int, db: AsyncSession = Depends(get_db)):
    return CardOut.model_validate(await card_service.get_card(db, card_id))


@router.patch("/{card_id}", response_model=CardOut)
async def update_card(
    card_id: int,
    body: CardUpdate,
    db: AsyncSession = Depends(get_db),
):
    card = await card_service.update_card(db, card_id, body)
    return CardOut.model_validate(card)


@router.patch("/{card_id}/done", response_model=CardOut)
async def set_card_done(
    card_id: int,
    body: CardDoneUpdate,
    db: AsyncSession = Depends(get_db),
):
    card = await card_service.set_card_done(db, card_id, body.is_done)
    return CardOut.model_validate(card)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: int, db: AsyncSession = Depends(get_db)):
    await card_service.delete_card(db, card_id)
