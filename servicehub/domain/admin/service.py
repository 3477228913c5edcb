"""Admin service - User moderation and edit request review"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...models import BusinessEditRequest, User
from ...store.procedures import (
    admin_change_user_role,
    admin_delete_user,
    admin_suspend_user,
    admin_unsuspend_user,
    apply_business_edit_request,
    reject_business_edit_request,
)
from ...store.results import ProcedureResult

logger = logging.getLogger(__name__)


def _response(result: ProcedureResult) -> dict:
    result.raise_for_error()
    return {"message": result.message, "data": result.data}


class AdminService:
    """Service layer for admin operations"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self, role: Optional[str] = None, suspended: Optional[bool] = None) -> list[User]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        if suspended is not None:
            query = query.filter(User.is_suspended.is_(suspended))
        return query.order_by(User.id).all()

    def change_role(self, ctx: RequestContext, user_id: int, role: str) -> dict:
        return _response(admin_change_user_role(self.db, ctx, user_id, role))

    def suspend(self, ctx: RequestContext, user_id: int, reason: Optional[str] = None) -> dict:
        return _response(admin_suspend_user(self.db, ctx, user_id, reason))

    def unsuspend(self, ctx: RequestContext, user_id: int) -> dict:
        return _response(admin_unsuspend_user(self.db, ctx, user_id))

    def delete_user(self, ctx: RequestContext, user_id: int) -> dict:
        return _response(admin_delete_user(self.db, ctx, user_id))

    # ------------------------------------------------------------------
    # Business edit requests
    # ------------------------------------------------------------------

    def list_edit_requests(self, status: Optional[str] = "pending") -> list[BusinessEditRequest]:
        query = self.db.query(BusinessEditRequest)
        if status:
            query = query.filter(BusinessEditRequest.status == status)
        return query.order_by(BusinessEditRequest.created_at, BusinessEditRequest.id).all()

    def approve_edit_request(
        self, ctx: RequestContext, request_id: int, admin_notes: Optional[str] = None
    ) -> dict:
        response = _response(apply_business_edit_request(self.db, ctx, request_id, admin_notes))
        logger.info(f"✅ Edit request {request_id} approved by admin {ctx.user_id}")
        return response

    def reject_edit_request(
        self, ctx: RequestContext, request_id: int, admin_notes: Optional[str] = None
    ) -> dict:
        response = _response(reject_business_edit_request(self.db, ctx, request_id, admin_notes))
        logger.info(f"🚫 Edit request {request_id} rejected by admin {ctx.user_id}")
        return response
