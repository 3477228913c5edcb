"""Notification router - list and acknowledge in-app notifications"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import RequestContext, get_request_context
from ...database import get_db
from ...errors import NotFound
from ...models import Notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationResponse(BaseModel):
    id: int
    kind: str
    title: str
    body: Optional[str] = None
    data: Optional[dict] = None
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    query = db.query(Notification).filter(Notification.user_id == ctx.user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.id.desc()).limit(100).all()


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == ctx.user_id)
        .first()
    )
    if not notification:
        raise NotFound("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/read-all")
async def mark_all_read(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == ctx.user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    logger.info(f"🔔 Marked {updated} notifications read for user {ctx.user_id}")
    return {"updated": updated}
