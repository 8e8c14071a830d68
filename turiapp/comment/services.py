from typing import List, Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationError, NotFoundError, ForbiddenError
from ..core.responses import serialize
from ..review import crud as review_crud
from ..user.models import User
from . import crud
from .models import Comment
from .schemas import CommentResponse

logger = logging.getLogger(__name__)

MODERATION_ACTIONS = ("hide", "show", "delete")
MODERATOR_ROLES = ("admin", "moderator")


def _dump(comment: Comment) -> Dict[str, Any]:
    return serialize(CommentResponse, comment).model_dump()


def can_user_comment_on_review(db: Session, review_id: int, user_id: int) -> bool:
    """
    A user may leave one top-level comment on a public review they did
    not write.
    """
    review = review_crud.get_review(db, review_id)
    if review is None or not review.is_public:
        return False
    if review.user_id == user_id:
        return False
    return not crud.has_top_level_comment(db, review_id, user_id)


def create_comment(db: Session, review_id: int, user_id: int, content: str,
                   parent_id: Optional[int] = None) -> Comment:
    if not review_id or not user_id or content is None:
        raise ValidationError("Review ID, user ID, and content are required")
    if not content.strip():
        raise ValidationError("Comment content cannot be empty")

    if parent_id is None:
        if not can_user_comment_on_review(db, review_id, user_id):
            logger.warning(f"User {user_id} cannot comment on review {review_id}")
            raise ForbiddenError("User cannot comment on this review")
    else:
        review = review_crud.get_review(db, review_id)
        if review is None or not review.is_public:
            raise NotFoundError("Review not found")
        parent = crud.get_comment(db, parent_id)
        if parent is None or parent.review_id != review_id or not parent.is_public:
            raise NotFoundError("Parent comment not found")

    comment = crud.create_comment(
        db,
        {"review_id": review_id, "user_id": user_id, "content": content.strip(), "parent_id": parent_id},
    )
    logger.info(f"Comment created: {comment.id} on review {review_id} by user {user_id}")
    return comment


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = crud.get_comment(db, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def get_comment_with_details(db: Session, comment_id: int) -> Dict[str, Any]:
    comment = get_comment(db, comment_id)
    data = _dump(comment)
    if comment.parent_id is None:
        data["replies"] = [_dump(reply) for reply in crud.get_comment_replies(db, comment_id, limit=10)]
    return data


def update_comment(db: Session, comment_id: int, user: User, content: str) -> Comment:
    comment = crud.get_comment(db, comment_id)
    if comment is None or comment.user_id != user.id:
        raise NotFoundError("Comment not found or unauthorized to update")
    if not content or not content.strip():
        raise ValidationError("Comment content cannot be empty")
    comment = crud.comments.update(db, comment, {"content": content.strip()})
    logger.info(f"Comment updated: {comment_id} by user {user.id}")
    return comment


def delete_comment(db: Session, comment_id: int, user: User) -> None:
    comment = crud.get_comment(db, comment_id)
    if comment is None or (comment.user_id != user.id and user.role not in MODERATOR_ROLES):
        raise NotFoundError("Comment not found or unauthorized to delete")
    crud.comments.delete(db, comment)
    logger.info(f"Comment deleted: {comment_id} by user {user.id}")


def get_comments_by_review(db: Session, review_id: int, limit: int = 50, offset: int = 0) -> List[Comment]:
    if review_crud.get_review(db, review_id) is None:
        raise NotFoundError("Review not found")
    return crud.get_comments_by_review(db, review_id, limit, offset)


def get_comments_with_replies(db: Session, review_id: int, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]:
    if review_crud.get_review(db, review_id) is None:
        raise NotFoundError("Review not found")
    result = []
    for comment in crud.get_comments_by_review(db, review_id, limit, offset, top_level_only=True):
        data = _dump(comment)
        data["replies"] = [_dump(reply) for reply in crud.get_comment_replies(db, comment.id, limit=10)]
        result.append(data)
    return result


def get_comment_replies(db: Session, comment_id: int, limit: int = 10, offset: int = 0) -> List[Comment]:
    get_comment(db, comment_id)
    return crud.get_comment_replies(db, comment_id, limit, offset)


def get_comment_thread(db: Session, comment_id: int) -> List[Dict[str, Any]]:
    rows = crud.get_comment_thread(db, comment_id)
    if not rows:
        raise NotFoundError("Comment not found")
    thread = []
    for comment, level in rows:
        data = _dump(comment)
        data["level"] = level
        thread.append(data)
    return thread


def get_user_comments(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Comment]:
    return crud.get_user_comments(db, user_id, limit, offset)


def get_recent_comments(db: Session, limit: int = 20) -> List[Comment]:
    return crud.get_recent_comments(db, limit)


def get_comment_count(db: Session, review_id: int) -> int:
    return crud.count_by_review(db, review_id)


def get_user_comment_stats(db: Session, user_id: int) -> Dict[str, Any]:
    return crud.get_user_comment_stats(db, user_id)


def search_comments(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Comment]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_comments(db, term.strip(), limit, offset)


def moderate_comment(db: Session, comment_id: int, action: str, moderator: User) -> Dict[str, Any]:
    """
    Apply a moderation action.

    ``hide`` and ``show`` flip ``is_public``; ``delete`` removes the row.
    """
    if action not in MODERATION_ACTIONS:
        raise ValidationError("Invalid moderation action")
    comment = get_comment(db, comment_id)

    if action == "delete":
        crud.comments.delete(db, comment)
    else:
        crud.comments.update(db, comment, {"is_public": action == "show"})
    logger.info(f"Comment {comment_id} moderated ({action}) by user {moderator.id}")
    return {"id": comment_id, "action": action}
