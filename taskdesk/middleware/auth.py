"""JWT authentication dependency for FastAPI."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel
from sqlmodel import Session

from taskdesk.config import AUTH_ALGORITHM, AUTH_SECRET, TOKEN_EXPIRE_DAYS
from taskdesk.db.config import get_session
from taskdesk.errors import Unauthorized
from taskdesk.models.user import User


class CurrentUser(BaseModel):
    """Authenticated requester: opaque id plus display fields."""
    user_id: str
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


def create_access_token(user: User, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "username": user.username,
        "iat": now,
        "exp": now + (expires_in or timedelta(days=TOKEN_EXPIRE_DAYS)),
    }
    return jwt.encode(payload, AUTH_SECRET, algorithm=AUTH_ALGORITHM)


def get_current_user(
    request: Request,
    session: Session = Depends(get_session),
) -> CurrentUser:
    """
    Validate the bearer token and load the user it names.

    Args:
        request: FastAPI request object to extract Authorization header
        session: Database session used to confirm the user still exists

    Returns:
        CurrentUser for the token's subject

    Raises:
        Unauthorized: If the header is missing, the token is invalid or
            expired, or the user no longer exists
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise Unauthorized("Missing or invalid Authorization header")

    token = auth_header[7:]  # Remove "Bearer " prefix

    try:
        payload = jwt.decode(token, AUTH_SECRET, algorithms=[AUTH_ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthorized("Token has expired") from None
    except JWTError:
        raise Unauthorized("Invalid token") from None

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token: missing user ID")

    user = session.get(User, user_id)
    if user is None:
        raise Unauthorized("User no longer exists")

    return CurrentUser(
        user_id=user.id,
        email=user.email,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
    )
