"""
In-app notification records for workflow events
(quote sent/answered, invoice paid, review requested)
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .models import Notification

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: int,
    kind: str,
    title: str,
    body: Optional[str] = None,
    data: Optional[dict] = None,
) -> Notification:
    """Queue a notification in the caller's transaction (the caller commits)"""
    notification = Notification(user_id=user_id, kind=kind, title=title, body=body, data=data)
    db.add(notification)
    logger.info(f"🔔 {kind} notification queued for user {user_id}")
    return notification
