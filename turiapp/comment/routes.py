from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging

from ..core.database import get_db
from ..core.auth import get_current_user, require_roles
from ..core.responses import success_response, serialize
from ..user.models import User
from . import services
from .schemas import CommentCreate, CommentUpdate, ModerationRequest, CommentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = services.create_comment(
        db, comment_in.review_id, current_user.id, comment_in.content, comment_in.parent_id
    )
    return success_response(serialize(CommentResponse, comment), "Comment created successfully", status.HTTP_201_CREATED)


@router.get("/recent")
async def get_recent_comments(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db)):
    comments = services.get_recent_comments(db, limit)
    return success_response(serialize(CommentResponse, comments), "Recent comments retrieved successfully")


@router.get("/search")
async def search_comments(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    comments = services.search_comments(db, q, limit, offset)
    return success_response(serialize(CommentResponse, comments), "Comments retrieved successfully")


@router.get("/review/{review_id}")
async def get_comments_by_review(
    review_id: int,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    comments = services.get_comments_by_review(db, review_id, limit, offset)
    return success_response(serialize(CommentResponse, comments), "Review comments retrieved successfully")


@router.get("/review/{review_id}/with-replies")
async def get_comments_with_replies(
    review_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    comments = services.get_comments_with_replies(db, review_id, limit, offset)
    return success_response(comments, "Review comments retrieved successfully")


@router.get("/review/{review_id}/count")
async def get_comment_count(review_id: int, db: Session = Depends(get_db)):
    count = services.get_comment_count(db, review_id)
    return success_response({"review_id": review_id, "count": count}, "Comment count retrieved successfully")


@router.get("/review/{review_id}/can-comment")
async def can_comment_on_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    can_comment = services.can_user_comment_on_review(db, review_id, current_user.id)
    return success_response({"canComment": can_comment}, "Comment eligibility checked")


@router.get("/user/{user_id}")
async def get_user_comments(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    comments = services.get_user_comments(db, user_id, limit, offset)
    return success_response(serialize(CommentResponse, comments), "User comments retrieved successfully")


@router.get("/user/{user_id}/stats")
async def get_user_comment_stats(user_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_user_comment_stats(db, user_id), "User comment statistics retrieved successfully")


@router.get("/my")
async def get_my_comments(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comments = services.get_user_comments(db, current_user.id, limit, offset)
    return success_response(serialize(CommentResponse, comments), "Your comments retrieved successfully")


@router.get("/my/stats")
async def get_my_comment_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.get_user_comment_stats(db, current_user.id), "Your comment statistics retrieved successfully")


@router.get("/{comment_id}")
async def get_comment(comment_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_comment_with_details(db, comment_id), "Comment retrieved successfully")


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = services.update_comment(db, comment_id, current_user, comment_in.content)
    return success_response(serialize(CommentResponse, comment), "Comment updated successfully")


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.delete_comment(db, comment_id, current_user)
    return success_response({"id": comment_id}, "Comment deleted successfully")


@router.get("/{comment_id}/replies")
async def get_comment_replies(
    comment_id: int,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    replies = services.get_comment_replies(db, comment_id, limit, offset)
    return success_response(serialize(CommentResponse, replies), "Comment replies retrieved successfully")


@router.get("/{comment_id}/thread")
async def get_comment_thread(comment_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_comment_thread(db, comment_id), "Comment thread retrieved successfully")


@router.post("/{comment_id}/moderate")
async def moderate_comment(
    comment_id: int,
    moderation: ModerationRequest,
    current_user: User = Depends(require_roles("admin", "moderator")),
    db: Session = Depends(get_db),
):
    result = services.moderate_comment(db, comment_id, moderation.action, current_user)
    return success_response(result, "Comment moderated successfully")
