"""
Invoice and Ledger Models for customer billing and platform accounting
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Invoice(Base):
    """Invoice issued by a business to a customer (amounts in integer cents)"""

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("business_id", "invoice_number", name="uq_invoice_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)

    invoice_number = Column(String(50), nullable=False, index=True)  # INV-2026-00001
    title = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Amounts
    subtotal_cents = Column(Integer, nullable=False, default=0)
    total_cents = Column(Integer, nullable=False, default=0)
    paid_cents = Column(Integer, nullable=False, default=0)
    balance_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), default="USD")

    # Status
    status = Column(String(20), nullable=False, default="draft")
    # draft, sent, partially_paid, paid, overdue
    payment_method = Column(String(50), nullable=True)

    # Dates
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    email_sent_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.id"
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_cents = Column(Integer, nullable=False)
    amount_cents = Column(Integer, nullable=False)

    invoice = relationship("Invoice", back_populates="items")


class LedgerEntry(Base):
    """Platform transparency ledger record"""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(30), nullable=False, index=True)
    # income_fees, donations, infra_costs, staff, grants, reserves, other
    amount_cents = Column(Integer, nullable=False)
    period = Column(String(7), nullable=False, index=True)  # YYYY-MM
    note = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
