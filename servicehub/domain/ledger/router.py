"""Ledger router - FastAPI endpoints for the transparency ledger"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, require_admin
from ...database import get_db
from .schemas import LedgerEntryCreate, LedgerEntryResponse, LedgerEntryUpdate, LedgerSummary
from .service import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    """Dependency injection for LedgerService"""
    return LedgerService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/summary/{period}", response_model=LedgerSummary)
async def get_summary(period: str, service: LedgerService = Depends(get_ledger_service)):
    """Public income/expense summary for a YYYY-MM period"""
    return service.summary(period)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=list[LedgerEntryResponse])
async def list_entries(
    period: Optional[str] = None,
    ctx: RequestContext = Depends(require_admin),
    service: LedgerService = Depends(get_ledger_service),
):
    return service.list_entries(period)


@router.post("", response_model=LedgerEntryResponse, status_code=201)
async def create_entry(
    data: LedgerEntryCreate,
    ctx: RequestContext = Depends(require_admin),
    service: LedgerService = Depends(get_ledger_service),
):
    return service.create_entry(ctx, data)


@router.patch("/{entry_id}", response_model=LedgerEntryResponse)
async def update_entry(
    entry_id: int,
    data: LedgerEntryUpdate,
    ctx: RequestContext = Depends(require_admin),
    service: LedgerService = Depends(get_ledger_service),
):
    return service.update_entry(ctx, entry_id, data)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: int,
    ctx: RequestContext = Depends(require_admin),
    service: LedgerService = Depends(get_ledger_service),
):
    return service.delete_entry(ctx, entry_id)
