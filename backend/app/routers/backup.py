"""Backup router — download and restore a JSON copy of all data.

Endpoints:
    GET    /api/backup/           Full backup document
    POST   /api/backup/restore    Replace all cards and invoices
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.backup import RestoreSummary
from app.services.backup import create_backup, restore_backup

router = APIRouter()


@router.get("/")
async def download_backup(db: AsyncSession = Depends(get_db)):
    return await create_backup(db)


@router.post("/restore", response_model=RestoreSummary)
async def restore(
    document: Any = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Validate the uploaded document, then replace stored data with it."""
    return await restore_backup(db, document)
