import logging
from typing import Optional

from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_USER_KEY = "user_id"
RETURN_TO_KEY = "return_to"


class SigninRequired(Exception):
    """Raised when a guarded action is requested without a signed-in user."""

    def __init__(self, path: Optional[str] = None):
        super().__init__("Please sign in to access this page.")
        self.path = path


class AccessDenied(Exception):
    """Raised when a signed-in user may not perform the requested action."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    email = (email or "").strip().lower()
    user = db.scalar(select(User).where(User.email == email))
    if user is None or not verify_password(password or "", user.password_hash):
        logger.warning("Failed sign-in attempt for %s", email or "<blank>")
        return None
    return user


def sign_in(request: Request, user: User) -> None:
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %s signed in", user.id)


def sign_out(request: Request) -> None:
    user_id = request.session.pop(SESSION_USER_KEY, None)
    request.session.pop(RETURN_TO_KEY, None)
    if user_id is not None:
        logger.info("User %s signed out", user_id)


def pop_return_to(request: Request, default: str) -> str:
    return request.session.pop(RETURN_TO_KEY, None) or default


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    return db.get(User, user_id)


def require_user(
    request: Request, current_user: Optional[User] = Depends(get_current_user)
) -> User:
    if not current_user:
        path = None
        if request.method == "GET":
            path = request.url.path
            if request.url.query:
                path = f"{path}?{request.url.query}"
        raise SigninRequired(path)
    return current_user


def can_modify(actor: Optional[User], target: User) -> bool:
    if actor is None:
        return False
    return actor.id == target.id


def can_destroy(actor: Optional[User], target: User) -> bool:
    if actor is None:
        return False
    return bool(actor.admin)


def authorize(allowed: bool) -> None:
    if not allowed:
        raise AccessDenied()
