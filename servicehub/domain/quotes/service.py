"""Quote service - Business logic for the quote lifecycle"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, PermissionDenied
from ...models import Booking, Quote
from ...store.procedures import respond_to_quote, send_quote
from .schemas import QuoteCreate, QuoteRespond

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("sent", "viewed")


class QuoteService:
    """Service layer for quote business logic"""

    def __init__(self, db: Session):
        self.db = db

    def _booking_for(self, ctx: RequestContext, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFound("Booking not found")
        if (
            booking.customer_id != ctx.user_id
            and booking.business.owner_id != ctx.user_id
            and not ctx.is_admin
        ):
            raise PermissionDenied("You do not have access to this booking")
        return booking

    def _expire_if_due(self, quote: Quote) -> Quote:
        if quote.status in OPEN_STATUSES and quote.expires_at and quote.expires_at < datetime.utcnow():
            quote.status = "expired"
            self.db.commit()
            self.db.refresh(quote)
            logger.info(f"⌛ Quote {quote.id} expired")
        return quote

    def list_quotes(self, ctx: RequestContext, booking_id: int) -> list[Quote]:
        self._booking_for(ctx, booking_id)
        quotes = (
            self.db.query(Quote)
            .filter(Quote.booking_id == booking_id)
            .order_by(Quote.created_at.desc(), Quote.id.desc())
            .all()
        )
        return [self._expire_if_due(q) for q in quotes]

    def get_latest(self, ctx: RequestContext, booking_id: int) -> Quote:
        """The actionable quote for a booking is the most recently created one"""
        quotes = self.list_quotes(ctx, booking_id)
        if not quotes:
            raise NotFound("No quote has been sent for this booking")
        return quotes[0]

    def send(self, ctx: RequestContext, booking_id: int, data: QuoteCreate) -> Quote:
        result = send_quote(
            self.db, ctx, booking_id, data.amount_cents, data.message, data.valid_days
        ).raise_for_error()
        logger.info(f"📨 Quote {result.data['quote_id']} sent for booking {booking_id}")
        return self.db.query(Quote).filter(Quote.id == result.data["quote_id"]).first()

    def view(self, ctx: RequestContext, quote_id: int) -> Quote:
        """Return a quote, recording the first view by the customer"""
        quote = self.db.query(Quote).filter(Quote.id == quote_id).first()
        if not quote:
            raise NotFound("Quote not found")
        booking = self._booking_for(ctx, quote.booking_id)

        quote = self._expire_if_due(quote)
        if booking.customer_id == ctx.user_id and quote.status == "sent":
            quote.status = "viewed"
            quote.viewed_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(quote)
        return quote

    def respond(self, ctx: RequestContext, quote_id: int, data: QuoteRespond) -> Quote:
        quote = self.db.query(Quote).filter(Quote.id == quote_id).first()
        if quote:
            self._expire_if_due(quote)

        respond_to_quote(
            self.db, ctx, quote_id, data.response, data.message, data.rejection_reason
        ).raise_for_error()
        logger.info(f"✅ Quote {quote_id} {data.response} by user {ctx.user_id}")
        return self.db.query(Quote).filter(Quote.id == quote_id).first()
