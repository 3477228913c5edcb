import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, SECRET_KEY
from .database import get_db
from .errors import AuthenticationRequired, PermissionDenied
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller, passed explicitly into every service call"""

    user_id: int
    role: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed bearer token for a user id"""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "exp": expire, "iat": datetime.utcnow()}
    return jose_jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str) -> Optional[dict]:
    """Verify and decode a bearer token. Returns None when invalid or expired."""
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"⚠️ JWT verification failed: {e}")
        return None


def _context_from_token(token: str, db: Session) -> RequestContext:
    payload = verify_access_token(token)
    if not payload or not payload.get("sub"):
        raise AuthenticationRequired("Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationRequired("Invalid or expired token") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token for unknown user_id: {user_id}")
        raise AuthenticationRequired("Invalid or expired token")
    if user.is_suspended:
        logger.warning(f"⚠️ Suspended user attempted access: user_id={user.id}")
        raise PermissionDenied("Account suspended")

    return RequestContext(user_id=user.id, role=user.role, email=user.email)


def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> RequestContext:
    """Resolve the authenticated caller for protected routes"""
    if not credentials:
        raise AuthenticationRequired("Not authenticated")
    return _context_from_token(credentials.credentials, db)


def get_optional_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[RequestContext]:
    """Resolve the caller when a token is present (public routes)"""
    if not credentials:
        return None
    return _context_from_token(credentials.credentials, db)


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not ctx.is_admin:
        raise PermissionDenied("Admin access required")
    return ctx
