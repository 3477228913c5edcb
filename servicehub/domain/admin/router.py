"""Admin router - FastAPI endpoints for platform administration"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import RequestContext, require_admin
from ...database import get_db
from ..businesses.schemas import EditRequestResponse
from .schemas import (
    AdminUserResponse,
    EditRequestDecision,
    ProcedureResponse,
    UserRoleUpdate,
    UserSuspend,
)
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


# ============================================================================
# USERS
# ============================================================================


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    role: Optional[str] = None,
    suspended: Optional[bool] = None,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_users(role, suspended)


@router.patch("/users/{user_id}/role", response_model=ProcedureResponse)
async def change_user_role(
    user_id: int,
    data: UserRoleUpdate,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.change_role(ctx, user_id, data.role)


@router.post("/users/{user_id}/suspend", response_model=ProcedureResponse)
async def suspend_user(
    user_id: int,
    data: UserSuspend,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.suspend(ctx, user_id, data.reason)


@router.post("/users/{user_id}/unsuspend", response_model=ProcedureResponse)
async def unsuspend_user(
    user_id: int,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.unsuspend(ctx, user_id)


@router.delete("/users/{user_id}", response_model=ProcedureResponse)
async def delete_user(
    user_id: int,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Delete a user without bookings or businesses"""
    return service.delete_user(ctx, user_id)


# ============================================================================
# BUSINESS EDIT REQUESTS
# ============================================================================


@router.get("/edit-requests", response_model=list[EditRequestResponse])
async def list_edit_requests(
    status: Optional[str] = "pending",
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_edit_requests(status)


@router.post("/edit-requests/{request_id}/approve", response_model=ProcedureResponse)
async def approve_edit_request(
    request_id: int,
    data: EditRequestDecision,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Apply the proposed changes to the business"""
    return service.approve_edit_request(ctx, request_id, data.admin_notes)


@router.post("/edit-requests/{request_id}/reject", response_model=ProcedureResponse)
async def reject_edit_request(
    request_id: int,
    data: EditRequestDecision,
    ctx: RequestContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.reject_edit_request(ctx, request_id, data.admin_notes)
