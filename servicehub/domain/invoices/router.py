"""Invoice router - FastAPI endpoints for invoices"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from .schemas import (
    InvoiceBatchCreate,
    InvoiceBatchResponse,
    InvoiceCreate,
    InvoicePayment,
    InvoiceResponse,
    InvoiceUpdate,
)
from .service import InvoiceService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


# ============================================================================
# QUERIES
# ============================================================================


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    business_id: Optional[int] = None,
    status: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Get a business's invoices (owner) or the caller's own invoices"""
    return [to_response(i) for i in service.list_invoices(ctx, business_id, status)]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    return to_response(service.get_invoice(ctx, invoice_id))


# ============================================================================
# MUTATIONS
# ============================================================================


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create a draft invoice"""
    return to_response(service.create_invoice(ctx, data))


@router.post("/batch", response_model=InvoiceBatchResponse)
async def create_invoice_batch(
    data: InvoiceBatchCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create draft invoices for several bookings, reporting each one"""
    return service.create_batch(ctx, data)


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    return to_response(service.update_invoice(ctx, invoice_id, data))


@router.post("/{invoice_id}/send", response_model=InvoiceResponse)
async def send_invoice(
    invoice_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Send a draft invoice to the customer (cannot be undone)"""
    return to_response(service.send_invoice(ctx, invoice_id))


@router.post("/{invoice_id}/mark-payment", response_model=InvoiceResponse)
async def mark_payment(
    invoice_id: int,
    data: InvoicePayment,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Record a (partial) payment"""
    return to_response(service.record_payment(ctx, invoice_id, data))


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    ctx: RequestContext = Depends(get_request_context),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(ctx, invoice_id)
