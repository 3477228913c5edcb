"""Invoice service - Business logic for invoicing and payment recording"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...config import DEFAULT_PAYMENT_TERMS_DAYS
from ...errors import (
    NotFound,
    ServiceError,
    StateConflict,
    StoreFailure,
    ValidationFailed,
)
from ...models import Booking, Business
from ...models_invoice import Invoice, InvoiceItem
from ...notifications import notify
from ...shared.access import require_business_owner
from .repository import InvoiceRepository
from .schemas import (
    InvoiceBatchCreate,
    InvoiceCreate,
    InvoiceItemIn,
    InvoicePayment,
    InvoiceResponse,
    InvoiceUpdate,
)

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = ("sent", "partially_paid")


def format_invoice_number(year: int, sequence: int) -> str:
    return f"INV-{year}-{sequence:05d}"


def effective_status(invoice: Invoice, today: Optional[date] = None) -> str:
    """Stored status, or "overdue" for an unpaid sent invoice past its due date"""
    today = today or datetime.utcnow().date()
    if (
        invoice.status in PAYABLE_STATUSES
        and invoice.balance_cents > 0
        and invoice.due_date < today
    ):
        return "overdue"
    return invoice.status


def to_response(invoice: Invoice, today: Optional[date] = None) -> InvoiceResponse:
    response = InvoiceResponse.model_validate(invoice)
    return response.model_copy(update={"status": effective_status(invoice, today)})


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get(self, invoice_id: int) -> Invoice:
        invoice = self.repo.get_invoice(self.db, invoice_id)
        if not invoice:
            raise NotFound("Invoice not found")
        return invoice

    def _get_for_provider(self, ctx: RequestContext, invoice_id: int) -> Invoice:
        invoice = self._get(invoice_id)
        require_business_owner(self.db, ctx, invoice.business_id)
        return invoice

    @staticmethod
    def _set_items(invoice: Invoice, items: list[InvoiceItemIn]) -> None:
        invoice.items.clear()
        for item in items:
            invoice.items.append(
                InvoiceItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    amount_cents=item.quantity * item.unit_price_cents,
                )
            )
        subtotal = sum(i.amount_cents for i in invoice.items)
        invoice.subtotal_cents = subtotal
        invoice.total_cents = subtotal
        invoice.balance_cents = subtotal - (invoice.paid_cents or 0)

    def _build(
        self,
        business: Business,
        customer_id: int,
        items: list[InvoiceItemIn],
        booking: Optional[Booking] = None,
        title: Optional[str] = None,
        notes: Optional[str] = None,
        issue_date: Optional[date] = None,
    ) -> Invoice:
        """Create a numbered draft invoice and flush it. Does not commit."""
        if booking is not None:
            if booking.business_id != business.id:
                raise ValidationFailed("Booking does not belong to this business")
            if booking.booking_status == "cancelled":
                raise StateConflict("Cannot invoice a cancelled booking")
            if self.repo.get_booking_invoice(self.db, booking.id):
                raise StateConflict(f"Booking {booking.id} already has an invoice")
            if not items:
                items = [
                    InvoiceItemIn(
                        description=f"Booking #{booking.id} on {booking.requested_date}",
                        quantity=1,
                        unit_price_cents=booking.total_price_cents or 0,
                    )
                ]

        if not items:
            raise ValidationFailed("An invoice needs at least one line item")

        issue_date = issue_date or datetime.utcnow().date()
        terms = business.payment_terms_days or DEFAULT_PAYMENT_TERMS_DAYS
        sequence = self.repo.next_sequence(self.db, business.id, issue_date.year)

        invoice = Invoice(
            business_id=business.id,
            customer_id=customer_id,
            booking_id=booking.id if booking is not None else None,
            invoice_number=format_invoice_number(issue_date.year, sequence),
            title=title or (f"{business.name} - Booking #{booking.id}" if booking else business.name),
            notes=notes,
            paid_cents=0,
            currency="USD",
            status="draft",
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=terms),
        )
        self._set_items(invoice, items)
        if invoice.total_cents <= 0:
            raise ValidationFailed("Invoice total must be greater than zero")

        self.db.add(invoice)
        self.db.flush()
        return invoice

    def _booking_or_404(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_invoice(self, ctx: RequestContext, invoice_id: int) -> Invoice:
        invoice = self._get(invoice_id)
        if invoice.customer_id == ctx.user_id and invoice.status != "draft":
            return invoice
        require_business_owner(self.db, ctx, invoice.business_id)
        return invoice

    def list_invoices(
        self, ctx: RequestContext, business_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Invoice]:
        if business_id is None:
            return self.repo.get_customer_invoices(self.db, ctx.user_id)
        require_business_owner(self.db, ctx, business_id)
        if status == "overdue":
            invoices = self.repo.get_business_invoices(self.db, business_id)
            return [i for i in invoices if effective_status(i) == "overdue"]
        return self.repo.get_business_invoices(self.db, business_id, status)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_invoice(self, ctx: RequestContext, data: InvoiceCreate) -> Invoice:
        business = require_business_owner(self.db, ctx, data.business_id)

        booking = None
        customer_id = data.customer_id
        if data.booking_id is not None:
            booking = self._booking_or_404(data.booking_id)
            customer_id = booking.customer_id
        if customer_id is None:
            raise ValidationFailed("customer_id is required when no booking is given")

        invoice = self._build(
            business,
            customer_id,
            data.items,
            booking=booking,
            title=data.title,
            notes=data.notes,
            issue_date=data.issue_date,
        )
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for business {business.id}")
        return invoice

    def create_batch(self, ctx: RequestContext, data: InvoiceBatchCreate) -> dict:
        """
        Create a draft invoice for each booking, each in its own savepoint.

        A failing booking is reported and skipped; invoices created before it
        are kept.
        """
        business = require_business_owner(self.db, ctx, data.business_id)
        succeeded, failed = [], []

        for booking_id in data.booking_ids:
            try:
                with self.db.begin_nested():
                    booking = self._booking_or_404(booking_id)
                    invoice = self._build(business, booking.customer_id, [], booking=booking)
                succeeded.append(invoice)
            except ServiceError as e:
                failed.append({"booking_id": booking_id, "error": e.message, "code": e.code})
            except SQLAlchemyError as e:
                logger.error(f"❌ Batch invoice for booking {booking_id} failed: {e}")
                failure = StoreFailure()
                failed.append({"booking_id": booking_id, "error": failure.message, "code": failure.code})

        self.db.commit()
        for invoice in succeeded:
            self.db.refresh(invoice)

        logger.info(
            f"🧾 Batch invoicing for business {business.id}: "
            f"{len(succeeded)} created, {len(failed)} failed"
        )
        return {"succeeded": [to_response(i) for i in succeeded], "failed": failed}

    def update_invoice(self, ctx: RequestContext, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        invoice = self._get_for_provider(ctx, invoice_id)
        if invoice.status != "draft":
            raise StateConflict("Only draft invoices can be edited")

        changes = data.model_dump(exclude_unset=True)
        if "title" in changes:
            invoice.title = data.title
        if "notes" in changes:
            invoice.notes = data.notes
        if data.due_date is not None:
            if data.due_date < invoice.issue_date:
                raise ValidationFailed("Due date cannot be before the issue date")
            invoice.due_date = data.due_date
        if data.items is not None:
            if not data.items:
                raise ValidationFailed("An invoice needs at least one line item")
            self._set_items(invoice, data.items)

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"✏️ Invoice {invoice.invoice_number} updated")
        return invoice

    def send_invoice(self, ctx: RequestContext, invoice_id: int) -> Invoice:
        invoice = self._get_for_provider(ctx, invoice_id)
        if invoice.status != "draft":
            raise StateConflict("Only draft invoices can be sent")

        invoice.status = "sent"
        invoice.email_sent_at = datetime.utcnow()
        notify(
            self.db,
            invoice.customer_id,
            "invoice_sent",
            f"Invoice {invoice.invoice_number}",
            data={"invoice_id": invoice.id, "balance_cents": invoice.balance_cents},
        )
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"📨 Invoice {invoice.invoice_number} sent to customer {invoice.customer_id}")
        return invoice

    def record_payment(self, ctx: RequestContext, invoice_id: int, data: InvoicePayment) -> Invoice:
        """
        Record a payment against a sent invoice.

        The invoice becomes partially_paid or paid. On full payment the linked
        booking is marked paid, and a completed booking triggers a review
        request to the customer.
        """
        invoice = self._get_for_provider(ctx, invoice_id)
        if invoice.status not in PAYABLE_STATUSES:
            raise StateConflict(f"Cannot record a payment on a {invoice.status} invoice")
        if data.amount_cents > invoice.balance_cents:
            raise ValidationFailed("Payment exceeds the outstanding balance")

        invoice.paid_cents = (invoice.paid_cents or 0) + data.amount_cents
        invoice.balance_cents = invoice.total_cents - invoice.paid_cents
        if data.payment_method:
            invoice.payment_method = data.payment_method

        if invoice.balance_cents <= 0:
            invoice.status = "paid"
            invoice.paid_at = datetime.utcnow()
            self._on_paid(invoice)
        else:
            invoice.status = "partially_paid"

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(
            f"💰 Payment of {data.amount_cents} recorded on {invoice.invoice_number}, "
            f"balance={invoice.balance_cents}"
        )
        return invoice

    def _on_paid(self, invoice: Invoice) -> None:
        if invoice.booking_id is None:
            return
        booking = self.db.query(Booking).filter(Booking.id == invoice.booking_id).first()
        if booking is None:
            return
        booking.payment_status = "paid"
        if booking.booking_status == "completed":
            notify(
                self.db,
                booking.customer_id,
                "review_request",
                f"How was your service from {booking.business.name}?",
                data={"booking_id": booking.id, "business_id": booking.business_id},
            )

    def delete_invoice(self, ctx: RequestContext, invoice_id: int) -> dict:
        invoice = self._get_for_provider(ctx, invoice_id)
        if invoice.status != "draft":
            raise StateConflict("Only draft invoices can be deleted")
        number = invoice.invoice_number
        self.db.delete(invoice)
        self.db.commit()
        logger.info(f"🗑️ Draft invoice {number} deleted")
        return {"message": "Invoice deleted"}
