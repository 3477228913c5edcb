"""
Stored procedures.

Each procedure is one database transaction: it commits when it returns a
successful ProcedureResult and rolls back otherwise. Database errors are
logged with their raw text and returned as a generic store_error result.
"""

import functools
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import RequestContext
from ..config import DEFAULT_AFTERNOON_JOBS, DEFAULT_MORNING_JOBS, QUOTE_VALID_DAYS
from ..errors import NotFound, PermissionDenied, StateConflict, StoreFailure
from ..models import Booking, Business, BusinessEditRequest, Quote, User
from ..models_availability import AvailabilityRule
from ..notifications import notify
from .results import ProcedureResult

logger = logging.getLogger(__name__)

USER_ROLES = ("customer", "business", "admin")
OPEN_QUOTE_STATUSES = ("sent", "viewed")
EDITABLE_BUSINESS_FIELDS = (
    "name",
    "category",
    "description",
    "phone",
    "email",
    "service_area",
    "min_booking_notice_hours",
    "payment_terms_days",
)


def procedure(fn):
    """Run fn as a single transaction and convert database errors into a result"""

    @functools.wraps(fn)
    def wrapper(db: Session, *args, **kwargs) -> ProcedureResult:
        try:
            result = fn(db, *args, **kwargs)
            if result.ok:
                db.commit()
            else:
                db.rollback()
                logger.info(f"↩️ {fn.__name__} rejected: {result.message}")
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ {fn.__name__} failed: {e}")
            return ProcedureResult.failure("The operation could not be completed", code=StoreFailure.code)

    return wrapper


def _denied(message: str) -> ProcedureResult:
    return ProcedureResult.failure(message, code=PermissionDenied.code)


def _missing(message: str) -> ProcedureResult:
    return ProcedureResult.failure(message, code=NotFound.code)


def _conflict(message: str) -> ProcedureResult:
    return ProcedureResult.failure(message, code=StateConflict.code)


# ============================================================================
# AVAILABILITY
# ============================================================================


def _find_rule(db: Session, business_id: int, weekday: int) -> Optional[AvailabilityRule]:
    return (
        db.query(AvailabilityRule)
        .filter(AvailabilityRule.business_id == business_id, AvailabilityRule.weekday == weekday)
        .first()
    )


@procedure
def auto_create_availability_rule(db: Session, business_id: int, weekday: int) -> ProcedureResult:
    """
    Insert the default rule for a weekday unless one exists.

    A concurrent insert for the same (business, weekday) loses on the unique
    constraint; the loser re-reads and returns the winner's rule.
    """
    if weekday < 0 or weekday > 6:
        return ProcedureResult.failure(f"Invalid weekday: {weekday}")

    rule = _find_rule(db, business_id, weekday)
    if rule:
        return ProcedureResult.success("Rule already exists", rule_id=rule.id, created=False)

    try:
        with db.begin_nested():
            rule = AvailabilityRule(
                business_id=business_id,
                weekday=weekday,
                morning_jobs=DEFAULT_MORNING_JOBS,
                afternoon_jobs=DEFAULT_AFTERNOON_JOBS,
                morning_start="08:00",
                afternoon_start="12:00",
                afternoon_end="17:00",
                is_active=True,
                auto_created=True,
            )
            db.add(rule)
            db.flush()
    except IntegrityError:
        rule = _find_rule(db, business_id, weekday)
        if rule is None:
            raise
        logger.info(f"📅 Rule for business {business_id} weekday {weekday} created concurrently")
        return ProcedureResult.success("Rule already exists", rule_id=rule.id, created=False)

    logger.info(f"📅 Auto-created availability rule for business {business_id} weekday {weekday}")
    return ProcedureResult.success("Rule created", rule_id=rule.id, created=True)


# ============================================================================
# QUOTES
# ============================================================================


def _latest_quote(db: Session, booking_id: int) -> Optional[Quote]:
    return (
        db.query(Quote)
        .filter(Quote.booking_id == booking_id)
        .order_by(Quote.created_at.desc(), Quote.id.desc())
        .first()
    )


@procedure
def send_quote(
    db: Session,
    actor: RequestContext,
    booking_id: int,
    amount_cents: int,
    message: Optional[str] = None,
    valid_days: int = QUOTE_VALID_DAYS,
) -> ProcedureResult:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        return _missing("Booking not found")
    business = db.query(Business).filter(Business.id == booking.business_id).first()
    if business.owner_id != actor.user_id and not actor.is_admin:
        return _denied("Only the service provider can send quotes")
    if booking.payment_status == "paid" or booking.booking_status in ("completed", "cancelled"):
        return _conflict("Quotes cannot be sent for closed bookings")
    if amount_cents <= 0:
        return ProcedureResult.failure("Quote amount must be greater than zero")

    now = datetime.utcnow()
    superseded = (
        db.query(Quote)
        .filter(Quote.booking_id == booking_id, Quote.status.in_(OPEN_QUOTE_STATUSES))
        .all()
    )
    for old in superseded:
        old.status = "expired"

    quote = Quote(
        booking_id=booking_id,
        amount_cents=amount_cents,
        message=message,
        status="sent",
        sent_at=now,
        expires_at=now + timedelta(days=valid_days),
        created_at=now,
    )
    db.add(quote)
    booking.status = "quoted"
    db.flush()

    notify(
        db,
        booking.customer_id,
        "quote_sent",
        f"New quote from {business.name}",
        data={"booking_id": booking_id, "quote_id": quote.id},
    )
    return ProcedureResult.success("Quote sent", quote_id=quote.id, superseded=len(superseded))


@procedure
def respond_to_quote(
    db: Session,
    actor: RequestContext,
    quote_id: int,
    response: str,
    message: Optional[str] = None,
    rejection_reason: Optional[str] = None,
) -> ProcedureResult:
    if response not in ("accepted", "rejected"):
        return ProcedureResult.failure("Response must be 'accepted' or 'rejected'")
    if response == "rejected" and not (rejection_reason and rejection_reason.strip()):
        return ProcedureResult.failure("A rejection reason is required")

    quote = db.query(Quote).filter(Quote.id == quote_id).first()
    if not quote:
        return _missing("Quote not found")
    booking = db.query(Booking).filter(Booking.id == quote.booking_id).first()
    if booking.customer_id != actor.user_id:
        return _denied("Only the customer can respond to this quote")

    latest = _latest_quote(db, booking.id)
    if latest.id != quote.id:
        return _conflict("This quote has been replaced by a newer quote")
    if quote.status not in OPEN_QUOTE_STATUSES:
        return _conflict(f"Quote has already been {quote.status}")

    now = datetime.utcnow()
    if quote.expires_at and quote.expires_at < now:
        return _conflict("Quote has expired")

    quote.status = response
    quote.responded_at = now
    quote.response_message = message
    if response == "rejected":
        quote.rejection_reason = rejection_reason.strip()
        booking.status = "requested"
    else:
        booking.status = "accepted"

    business = db.query(Business).filter(Business.id == booking.business_id).first()
    notify(
        db,
        business.owner_id,
        "quote_response",
        f"Quote {response} for booking #{booking.id}",
        body=message,
        data={"booking_id": booking.id, "quote_id": quote.id, "response": response},
    )
    return ProcedureResult.success(f"Quote {response}", quote_id=quote.id)


# ============================================================================
# BUSINESS EDIT REQUESTS
# ============================================================================


def _pending_edit_request(db: Session, actor: RequestContext, request_id: int):
    if not actor.is_admin:
        return None, _denied("Admin access required")
    edit_request = db.query(BusinessEditRequest).filter(BusinessEditRequest.id == request_id).first()
    if not edit_request:
        return None, _missing("Edit request not found")
    if edit_request.status != "pending":
        return None, _conflict(f"Edit request has already been {edit_request.status}")
    return edit_request, None


@procedure
def apply_business_edit_request(
    db: Session, actor: RequestContext, request_id: int, admin_notes: Optional[str] = None
) -> ProcedureResult:
    edit_request, error = _pending_edit_request(db, actor, request_id)
    if error:
        return error

    business = db.query(Business).filter(Business.id == edit_request.business_id).first()
    applied = []
    for key, value in (edit_request.proposed_changes or {}).items():
        if key in EDITABLE_BUSINESS_FIELDS:
            setattr(business, key, value)
            applied.append(key)

    edit_request.status = "approved"
    edit_request.admin_notes = admin_notes
    edit_request.reviewed_at = datetime.utcnow()
    notify(
        db,
        edit_request.requester_id,
        "edit_request_approved",
        f"Your changes to {business.name} were approved",
        data={"edit_request_id": edit_request.id},
    )
    return ProcedureResult.success("Edit request applied", applied=applied)


@procedure
def reject_business_edit_request(
    db: Session, actor: RequestContext, request_id: int, admin_notes: Optional[str] = None
) -> ProcedureResult:
    edit_request, error = _pending_edit_request(db, actor, request_id)
    if error:
        return error

    edit_request.status = "rejected"
    edit_request.admin_notes = admin_notes
    edit_request.reviewed_at = datetime.utcnow()
    notify(
        db,
        edit_request.requester_id,
        "edit_request_rejected",
        "Your business changes were not approved",
        body=admin_notes,
        data={"edit_request_id": edit_request.id},
    )
    return ProcedureResult.success("Edit request rejected")


# ============================================================================
# USER ADMINISTRATION
# ============================================================================


def _target_user(db: Session, actor: RequestContext, user_id: int, action: str):
    if not actor.is_admin:
        return None, _denied("Admin access required")
    if actor.user_id == user_id:
        return None, _conflict(f"Admins cannot {action} their own account")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None, _missing("User not found")
    return user, None


@procedure
def admin_change_user_role(
    db: Session, actor: RequestContext, user_id: int, new_role: str
) -> ProcedureResult:
    if new_role not in USER_ROLES:
        return ProcedureResult.failure(f"Invalid role: {new_role}")
    user, error = _target_user(db, actor, user_id, "change the role of")
    if error:
        return error
    if user.role == new_role:
        return _conflict(f"User already has role {new_role}")

    old_role = user.role
    user.role = new_role
    logger.info(f"👤 Admin {actor.user_id} changed user {user_id} role {old_role} -> {new_role}")
    return ProcedureResult.success("Role updated", old_role=old_role, new_role=new_role)


@procedure
def admin_suspend_user(
    db: Session, actor: RequestContext, user_id: int, reason: Optional[str] = None
) -> ProcedureResult:
    user, error = _target_user(db, actor, user_id, "suspend")
    if error:
        return error
    if user.is_suspended:
        return _conflict("User is already suspended")

    user.is_suspended = True
    user.suspended_reason = reason
    user.suspended_at = datetime.utcnow()
    logger.info(f"⛔ Admin {actor.user_id} suspended user {user_id}")
    return ProcedureResult.success("User suspended")


@procedure
def admin_unsuspend_user(db: Session, actor: RequestContext, user_id: int) -> ProcedureResult:
    user, error = _target_user(db, actor, user_id, "unsuspend")
    if error:
        return error
    if not user.is_suspended:
        return _conflict("User is not suspended")

    user.is_suspended = False
    user.suspended_reason = None
    user.suspended_at = None
    logger.info(f"✅ Admin {actor.user_id} unsuspended user {user_id}")
    return ProcedureResult.success("User unsuspended")


@procedure
def admin_delete_user(db: Session, actor: RequestContext, user_id: int) -> ProcedureResult:
    user, error = _target_user(db, actor, user_id, "delete")
    if error:
        return error

    has_bookings = db.query(Booking.id).filter(Booking.customer_id == user_id).first() is not None
    has_businesses = db.query(Business.id).filter(Business.owner_id == user_id).first() is not None
    if has_bookings or has_businesses:
        return _conflict("User has bookings or businesses; suspend the account instead")

    db.delete(user)
    logger.info(f"🗑️ Admin {actor.user_id} deleted user {user_id}")
    return ProcedureResult.success("User deleted")


# ============================================================================
# BOOKINGS
# ============================================================================


@procedure
def archive_booking(db: Session, actor: RequestContext, booking_id: int) -> ProcedureResult:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        return _missing("Booking not found")
    business = db.query(Business).filter(Business.id == booking.business_id).first()
    if business.owner_id != actor.user_id and not actor.is_admin:
        return _denied("Only the service provider or admin can archive bookings")
    if booking.is_archived:
        return _conflict("Booking is already archived")
    if booking.booking_status not in ("completed", "cancelled"):
        return _conflict("Only completed or cancelled bookings can be archived")

    booking.is_archived = True
    booking.archived_at = datetime.utcnow()
    return ProcedureResult.success("Booking archived", booking_id=booking.id)
