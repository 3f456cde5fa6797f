"""Invoice router — settlement invoices built from cards.

Endpoints:
    GET    /api/invoices/                        List invoices + net total
    POST   /api/invoices/preview                 Breakdown without saving
    POST   /api/invoices/                        Create invoice
    DELETE /api/invoices/                        Delete every invoice
    GET    /api/invoices/{invoice_id}            Single invoice
    PATCH  /api/invoices/{invoice_id}            Edit inputs (recalculates)
    PATCH  /api/invoices/{invoice_id}/payment    Record remaining amount
    DELETE /api/invoices/{invoice_id}            Delete invoice
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.invoice import (
    InvoiceBreakdownOut,
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceOut,
    InvoicePreviewRequest,
    InvoiceUpdate,
    PaymentUpdate,
)
from app.services import invoices as invoice_service

router = APIRouter()


@router.get("/", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    items, total, total_net_amount = await invoice_service.list_invoices(
        db, limit=limit, offset=offset,
    )
    return InvoiceListResponse(
        items=[InvoiceOut.model_validate(i) for i in items],
        total=total,
        limit=limit,
        offset=offset,
        total_net_amount=total_net_amount,
    )


@router.post("/preview", response_model=InvoiceBreakdownOut)
async def preview_invoice(
    body: InvoicePreviewRequest,
    db: AsyncSession = Depends(get_db),
):
    breakdown = await invoice_service.preview_invoice(db, body)
    return InvoiceBreakdownOut(**breakdown.as_dict())


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    body: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
):
    """Snapshot the selected cards and compute the settlement."""
    invoice = await invoice_service.create_invoice(db, body)
    return InvoiceOut.model_validate(invoice)


@router.delete("/")
async def delete_all_invoices(db: AsyncSession = Depends(get_db)):
    deleted = await invoice_service.delete_all_invoices(db)
    return {"deleted": deleted}


@router.get("/{invoice_id}", response_model=InvoiceOut)
async def get_invoice(invoice_id: int, db: AsyncSession = Depends(get_db)):
    return InvoiceOut.model_validate(await invoice_service.get_invoice(db, invoice_id))


@router.patch("/{invoice_id}", response_model=InvoiceOut)
async def update_invoice(
    invoice_id: int,
    body: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
):
    invoice = await invoice_service.update_invoice(db, invoice_id, body)
    return InvoiceOut.model_validate(invoice)


@router.patch("/{invoice_id}/payment", response_model=InvoiceOut)
async def update_payment(
    invoice_id: int,
    body: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Set what the farmer is still owed.  Out-of-range values are rejected."""
    invoice = await invoice_service.update_payment(db, invoice_id, body.remaining_amount)
    return InvoiceOut.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: int, db: AsyncSession = Depends(get_db)):
    await invoice_service.delete_invoice(db, invoice_id)
