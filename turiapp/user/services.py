from typing import List, Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationError, NotFoundError, ConflictError
from ..core.repository import integrity_as_conflict
from ..core.responses import serialize
from ..core.security import hash_password
from ..comment import crud as comment_crud
from ..favorite import crud as favorite_crud
from ..favorite.schemas import FavoriteResponse
from ..review import crud as review_crud
from ..review.schemas import ReviewResponse
from . import crud
from .models import User
from .schemas import UserResponse

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
USERNAME_TAKEN = "User with this username already exists"
IDENTITY_TAKEN = "User with this email or username already exists"
ROLES = ("user", "admin", "moderator")


def get_user(db: Session, user_id: int) -> User:
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_users(db: Session, **filters) -> List[User]:
    return crud.get_users(db, **filters)


def get_user_by_email(db: Session, email: str) -> User:
    user = crud.get_user_by_email(db, email.strip())
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_username(db: Session, username: str) -> User:
    user = crud.get_user_by_username(db, username)
    if user is None:
        raise NotFoundError("User not found")
    return user


def search_users(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[User]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_users(db, term.strip(), limit, offset)


def get_active_users(db: Session, limit: int = 20, offset: int = 0) -> List[User]:
    return crud.get_users(db, is_active=True, limit=limit, offset=offset)


def get_verified_users(db: Session, limit: int = 20, offset: int = 0) -> List[User]:
    return crud.get_users(db, is_active=True, is_verified=True, limit=limit, offset=offset)


def get_users_by_role(db: Session, role: str, limit: int = 20, offset: int = 0) -> List[User]:
    if role not in ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")
    return crud.get_users(db, role=role, limit=limit, offset=offset)


def get_recent_users(db: Session, days: int = 30, limit: int = 20) -> List[User]:
    return crud.get_recent_users(db, days, limit)


def _check_unique(db: Session, email: Optional[str], username: Optional[str], user_id: Optional[int] = None) -> None:
    if email:
        existing = crud.get_user_by_email(db, email)
        if existing is not None and existing.id != user_id:
            raise ConflictError(EMAIL_TAKEN)
    if username:
        existing = crud.get_user_by_username(db, username)
        if existing is not None and existing.id != user_id:
            raise ConflictError(USERNAME_TAKEN)


def create_user(db: Session, data: Dict[str, Any]) -> User:
    """
    Create a user from a validated payload.

    Args:
        db: Database session
        data: fields of UserCreate, ``password`` in clear text

    Returns:
        User: the new row

    Raises:
        ConflictError: email or username already in use
    """
    data["email"] = data["email"].lower()
    _check_unique(db, data["email"], data["username"])
    data["password_hash"] = hash_password(data.pop("password"))
    with integrity_as_conflict(db, IDENTITY_TAKEN):
        user = crud.create_user(db, data)
    logger.info(f"User created: {user.id} ({user.username})")
    return user


def update_user(db: Session, user_id: int, data: Dict[str, Any]) -> User:
    user = get_user(db, user_id)
    if data.get("email"):
        data["email"] = data["email"].lower()
    _check_unique(db, data.get("email"), data.get("username"), user_id)
    with integrity_as_conflict(db, IDENTITY_TAKEN):
        user = crud.update_user(db, user, data)
    logger.info(f"User updated: {user_id}")
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    crud.delete_user(db, user)
    logger.info(f"User deleted: {user_id}")


def _set_flag(db: Session, user_id: int, field: str, value: Any) -> User:
    user = get_user(db, user_id)
    user = crud.update_user(db, user, {field: value})
    logger.info(f"User {user_id} {field}={value}")
    return user


def verify_user(db: Session, user_id: int) -> User:
    return _set_flag(db, user_id, "is_verified", True)


def activate_user(db: Session, user_id: int) -> User:
    return _set_flag(db, user_id, "is_active", True)


def deactivate_user(db: Session, user_id: int) -> User:
    return _set_flag(db, user_id, "is_active", False)


def change_user_role(db: Session, user_id: int, role: str) -> User:
    if role not in ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")
    return _set_flag(db, user_id, "role", role)


def get_user_stats(db: Session, user_id: int) -> Dict[str, Any]:
    get_user(db, user_id)
    review_stats = review_crud.get_user_review_stats(db, user_id)
    comment_stats = comment_crud.get_user_comment_stats(db, user_id)
    return {
        "user_id": user_id,
        "total_reviews": review_stats["total_reviews"],
        "average_rating_given": review_stats["average_rating_given"],
        "total_helpful_received": review_stats["total_helpful_received"],
        "total_favorites": favorite_crud.count_user_favorites(db, user_id),
        "total_comments": comment_stats["total_comments"],
    }


def get_user_dashboard(db: Session, user_id: int) -> Dict[str, Any]:
    """Profile, counters and the latest five reviews and favorites."""
    user = get_user(db, user_id)
    return {
        "user": serialize(UserResponse, user),
        "stats": get_user_stats(db, user_id),
        "recent_reviews": serialize(ReviewResponse, review_crud.get_user_reviews(db, user_id, limit=5)),
        "recent_favorites": serialize(FavoriteResponse, favorite_crud.get_user_favorites(db, user_id, limit=5)),
    }
