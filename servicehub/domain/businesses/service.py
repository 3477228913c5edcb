"""Business service - Business profiles and edit requests"""

import logging

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, PermissionDenied, StateConflict, ValidationFailed
from ...models import Business, BusinessEditRequest
from ...shared.access import get_business_or_404, require_business_owner
from .schemas import BusinessCreate, BusinessEdit

logger = logging.getLogger(__name__)

PROVIDER_ROLES = ("business", "admin")
REQUIRED_FIELDS = ("name", "category", "min_booking_notice_hours", "payment_terms_days")


class BusinessService:
    """Service layer for business profiles"""

    def __init__(self, db: Session):
        self.db = db

    def create_business(self, ctx: RequestContext, data: BusinessCreate) -> Business:
        if ctx.role not in PROVIDER_ROLES:
            raise PermissionDenied("Only business accounts can create a business")
        business = Business(owner_id=ctx.user_id, **data.model_dump())
        self.db.add(business)
        self.db.commit()
        self.db.refresh(business)
        logger.info(f"🏢 Business {business.id} ({business.category}) created by user {ctx.user_id}")
        return business

    def get_business(self, business_id: int) -> Business:
        business = get_business_or_404(self.db, business_id)
        if business.is_archived:
            raise NotFound("Business not found")
        return business

    def list_owned(self, ctx: RequestContext) -> list[Business]:
        return (
            self.db.query(Business)
            .filter(Business.owner_id == ctx.user_id)
            .order_by(Business.id)
            .all()
        )

    def submit_edit_request(
        self, ctx: RequestContext, business_id: int, data: BusinessEdit
    ) -> BusinessEditRequest:
        """Queue profile changes for admin review"""
        business = require_business_owner(self.db, ctx, business_id, allow_admin=False)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationFailed("No changes proposed")
        cleared = [key for key in REQUIRED_FIELDS if key in changes and changes[key] is None]
        if cleared:
            raise ValidationFailed(f"Fields cannot be cleared: {', '.join(cleared)}")

        pending = (
            self.db.query(BusinessEditRequest.id)
            .filter(
                BusinessEditRequest.business_id == business.id,
                BusinessEditRequest.status == "pending",
            )
            .first()
        )
        if pending:
            raise StateConflict("An edit request for this business is already pending")

        edit_request = BusinessEditRequest(
            business_id=business.id,
            requester_id=ctx.user_id,
            proposed_changes=changes,
            status="pending",
        )
        self.db.add(edit_request)
        self.db.commit()
        self.db.refresh(edit_request)
        logger.info(f"📝 Edit request {edit_request.id} submitted for business {business.id}: {sorted(changes)}")
        return edit_request

    def list_edit_requests(self, ctx: RequestContext, business_id: int) -> list[BusinessEditRequest]:
        require_business_owner(self.db, ctx, business_id)
        return (
            self.db.query(BusinessEditRequest)
            .filter(BusinessEditRequest.business_id == business_id)
            .order_by(BusinessEditRequest.id.desc())
            .all()
        )
