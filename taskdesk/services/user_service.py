"""User registration, credential checks and profile updates."""
from typing import Any, Mapping, Optional, Union
import logging

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from taskdesk.errors import Conflict, NotFound, Unauthorized
from taskdesk.models.base import utcnow
from taskdesk.models.user import User
from taskdesk.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest
from taskdesk.schemas.base import validate_payload

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        return False


class UserService:
    """Service class for user accounts."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def _find_by(self, **criteria) -> Optional[User]:
        statement = select(User)
        for name, value in criteria.items():
            statement = statement.where(getattr(User, name) == value)
        return self.session.exec(statement).first()

    def register(self, payload: Union[RegisterRequest, Mapping[str, Any]]) -> User:
        request = validate_payload(RegisterRequest, payload)
        email = request.email.lower()

        if self._find_by(email=email) or self._find_by(username=request.username):
            raise Conflict("User with this email or username already exists")

        user = User(
            username=request.username,
            email=email,
            password_hash=hash_password(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("User with this email or username already exists") from None
        self.session.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, payload: Union[LoginRequest, Mapping[str, Any]]) -> User:
        """Return the user for valid credentials.

        Unknown email and wrong password fail with the same message.
        """
        request = validate_payload(LoginRequest, payload)
        user = self._find_by(email=request.email.lower())
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise Unauthorized("Invalid credentials")
        return user

    def update_profile(self, user_id: str, payload: Union[ProfileUpdate, Mapping[str, Any]]) -> User:
        changes = validate_payload(ProfileUpdate, payload).model_dump(exclude_unset=True)
        user = self.get(user_id)
        if user is None:
            raise NotFound("User not found")

        username = changes.get("username")
        if username and username != user.username and self._find_by(username=username):
            raise Conflict("Username is already taken")

        for name, value in changes.items():
            if name == "username" and not value:
                continue
            setattr(user, name, value.strip() if isinstance(value, str) else value)
        user.updated_at = utcnow()

        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("Username is already taken") from None
        self.session.refresh(user)
        logger.info("Updated profile for user %s", user.id)
        return user
