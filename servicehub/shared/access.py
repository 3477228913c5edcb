"""Ownership checks shared by the domain services"""

import logging

from sqlalchemy.orm import Session

from ..auth import RequestContext
from ..errors import NotFound, PermissionDenied
from ..models import Business

logger = logging.getLogger(__name__)


def get_business_or_404(db: Session, business_id: int) -> Business:
    business = db.query(Business).filter(Business.id == business_id).first()
    if not business:
        raise NotFound("Business not found")
    return business


def is_business_owner(ctx: RequestContext, business: Business) -> bool:
    return business.owner_id == ctx.user_id


def require_business_owner(
    db: Session, ctx: RequestContext, business_id: int, allow_admin: bool = True
) -> Business:
    """Return the business when the caller owns it (or is an admin)"""
    business = get_business_or_404(db, business_id)
    if is_business_owner(ctx, business) or (allow_admin and ctx.is_admin):
        return business
    logger.warning(
        f"⚠️ User {ctx.user_id} denied access to business {business_id} (role={ctx.role})"
    )
    raise PermissionDenied("You do not have access to this business")
