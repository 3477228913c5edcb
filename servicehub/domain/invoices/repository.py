"""Invoice repository - Database operations for invoices"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_invoice import Invoice


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.items))
            .filter(Invoice.id == invoice_id)
            .first()
        )

    @staticmethod
    def get_business_invoices(
        db: Session, business_id: int, status: Optional[str] = None
    ) -> list[Invoice]:
        query = db.query(Invoice).filter(Invoice.business_id == business_id)
        if status:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).all()

    @staticmethod
    def get_customer_invoices(db: Session, customer_id: int) -> list[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.customer_id == customer_id, Invoice.status != "draft")
            .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
            .all()
        )

    @staticmethod
    def get_booking_invoice(db: Session, booking_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.booking_id == booking_id).first()

    @staticmethod
    def next_sequence(db: Session, business_id: int, year: int) -> int:
        """Next per-business, per-year invoice sequence number"""
        prefix = f"INV-{year}-"
        numbers = (
            db.query(Invoice.invoice_number)
            .filter(Invoice.business_id == business_id, Invoice.invoice_number.like(f"{prefix}%"))
            .all()
        )
        highest = 0
        for (number,) in numbers:
            suffix = number[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return highest + 1
