import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import UnauthenticatedError
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# Missing header raises UnauthenticatedError (401) instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def resolve_user_from_token(db: Session, token: str) -> User:
    """Resolve the calling identity from a bearer token"""
    # Basic token format validation before processing
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise UnauthenticatedError("Invalid token format. Expected a valid JWT token.")

    payload = verify_jwt_token(token)
    if not payload:
        raise UnauthenticatedError("Token is invalid or has expired")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise UnauthenticatedError("Invalid token claims") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token references unknown user {user_id}")
        raise UnauthenticatedError("User no longer exists")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the Authorization: Bearer header"""
    if not credentials:
        raise UnauthenticatedError(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    return resolve_user_from_token(db, credentials.credentials)
