from typing import List, Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from ..core.auth import is_admin
from ..core.database import transaction
from ..core.exceptions import ValidationError, NotFoundError, ConflictError
from ..core.repository import integrity_as_conflict
from ..core.responses import serialize
from ..place import crud as place_crud
from ..user.models import User
from . import crud
from .models import Review
from .schemas import ReviewResponse

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "User has already reviewed this place"
ALREADY_HELPFUL = "User has already marked this review as helpful"


def can_user_review_place(db: Session, place_id: int, user_id: int) -> bool:
    return crud.get_review_by_place_and_user(db, place_id, user_id) is None


def create_review(db: Session, place_id: int, user_id: int, rating: int, title: Optional[str],
                  content: str, images: Optional[List[str]] = None) -> Review:
    """
    Create one user's review of a place.

    Args:
        db: Database session
        place_id: reviewed place
        user_id: author
        rating: 1 to 5
        title: optional headline
        content: review text
        images: optional list of image URLs

    Returns:
        Review: the stored review

    Raises:
        ValidationError: missing fields or rating out of range
        NotFoundError: place does not exist
        ConflictError: the user already reviewed this place
    """
    if not place_id or not user_id or rating is None or not content:
        raise ValidationError("Place ID, user ID, rating, and content are required")
    if not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")

    place = place_crud.get_place(db, place_id)
    if place is None or not place.is_active:
        raise NotFoundError("Place not found")
    if not can_user_review_place(db, place_id, user_id):
        logger.warning(f"User {user_id} tried to review place {place_id} twice")
        raise ConflictError(ALREADY_REVIEWED)

    data = {
        "place_id": place_id,
        "user_id": user_id,
        "rating": rating,
        "title": title,
        "content": content,
        "images": images,
    }
    # Unique (place_id, user_id) là tín hiệu xung đột cuối cùng
    with integrity_as_conflict(db, ALREADY_REVIEWED):
        with transaction(db):
            review = crud.create_review(db, data)
            place_crud.refresh_review_aggregates(db, place_id)
    db.refresh(review)
    logger.info(f"Review created: {review.id} for place {place_id} by user {user_id}")
    return review


def get_review(db: Session, review_id: int) -> Review:
    review = crud.get_review(db, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def get_review_with_details(db: Session, review_id: int) -> Dict[str, Any]:
    review = get_review(db, review_id)
    data = serialize(ReviewResponse, review).model_dump()
    data["comments_count"] = crud.count_comments(db, review_id)
    return data


def update_review(db: Session, review_id: int, user: User, data: Dict[str, Any]) -> Review:
    review = crud.get_review(db, review_id)
    if review is None or review.user_id != user.id:
        raise NotFoundError("Review not found or unauthorized to update")

    with transaction(db):
        crud.reviews.update(db, review, data, commit=False)
        if "rating" in data:
            place_crud.refresh_review_aggregates(db, review.place_id)
    db.refresh(review)
    logger.info(f"Review updated: {review_id} by user {user.id}")
    return review


def delete_review(db: Session, review_id: int, user: User) -> None:
    review = crud.get_review(db, review_id)
    if review is None or (review.user_id != user.id and not is_admin(user)):
        raise NotFoundError("Review not found or unauthorized to delete")

    place_id = review.place_id
    with transaction(db):
        crud.reviews.delete(db, review, commit=False)
        place_crud.refresh_review_aggregates(db, place_id)
    logger.info(f"Review deleted: {review_id} by user {user.id}")


def get_place_reviews(db: Session, place_id: int, rating: Optional[int] = None,
                      limit: int = 20, offset: int = 0) -> List[Review]:
    if place_crud.get_place(db, place_id) is None:
        raise NotFoundError("Place not found")
    return crud.get_place_reviews(db, place_id, rating, limit, offset)


def get_user_reviews(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Review]:
    return crud.get_user_reviews(db, user_id, limit, offset)


def get_recent_reviews(db: Session, limit: int = 20) -> List[Review]:
    return crud.get_recent_reviews(db, limit)


def get_top_rated_reviews(db: Session, limit: int = 20) -> List[Review]:
    return crud.get_top_rated_reviews(db, limit)


def get_reviews_by_rating(db: Session, rating: int, limit: int = 20, offset: int = 0) -> List[Review]:
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    return crud.get_reviews_by_rating(db, rating, limit, offset)


def search_reviews(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Review]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_reviews(db, term.strip(), limit, offset)


def get_review_stats(db: Session, place_id: int) -> Dict[str, Any]:
    if place_crud.get_place(db, place_id) is None:
        raise NotFoundError("Place not found")
    return crud.get_place_review_stats(db, place_id)


def get_user_review_stats(db: Session, user_id: int) -> Dict[str, Any]:
    return crud.get_user_review_stats(db, user_id)


def mark_review_helpful(db: Session, review_id: int, user_id: int) -> Dict[str, Any]:
    review = get_review(db, review_id)
    if crud.has_marked_helpful(db, review_id, user_id):
        raise ConflictError(ALREADY_HELPFUL)

    with integrity_as_conflict(db, ALREADY_HELPFUL):
        with transaction(db):
            crud.add_helpful_vote(db, review_id, user_id)
    db.refresh(review)
    return {"review_id": review_id, "helpful_count": review.helpful_count}


def get_helpful_count(db: Session, review_id: int) -> Dict[str, Any]:
    review = get_review(db, review_id)
    return {"review_id": review_id, "helpful_count": review.helpful_count}


def has_user_marked_helpful(db: Session, review_id: int, user_id: int) -> bool:
    get_review(db, review_id)
    return crud.has_marked_helpful(db, review_id, user_id)
