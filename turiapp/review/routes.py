from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.auth import get_current_user
from ..core.responses import success_response, serialize
from ..user.models import User
from . import services
from .schemas import ReviewCreate, ReviewUpdate, ReviewResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(
    review_in: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = services.create_review(
        db,
        place_id=review_in.place_id,
        user_id=current_user.id,
        rating=review_in.rating,
        title=review_in.title,
        content=review_in.content,
        images=review_in.images,
    )
    return success_response(serialize(ReviewResponse, review), "Review created successfully", status.HTTP_201_CREATED)


@router.get("/recent")
async def get_recent_reviews(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db)):
    reviews = services.get_recent_reviews(db, limit)
    return success_response(serialize(ReviewResponse, reviews), "Recent reviews retrieved successfully")


@router.get("/top-rated")
async def get_top_rated_reviews(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db)):
    reviews = services.get_top_rated_reviews(db, limit)
    return success_response(serialize(ReviewResponse, reviews), "Top rated reviews retrieved successfully")


@router.get("/rating/{rating}")
async def get_reviews_by_rating(
    rating: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    reviews = services.get_reviews_by_rating(db, rating, limit, offset)
    return success_response(serialize(ReviewResponse, reviews), "Reviews retrieved successfully")


@router.get("/search")
async def search_reviews(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    reviews = services.search_reviews(db, q, limit, offset)
    return success_response(serialize(ReviewResponse, reviews), "Reviews retrieved successfully")


@router.get("/place/{place_id}")
async def get_place_reviews(
    place_id: int,
    rating: Optional[int] = Query(None, ge=1, le=5),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    reviews = services.get_place_reviews(db, place_id, rating, limit, offset)
    return success_response(serialize(ReviewResponse, reviews), "Place reviews retrieved successfully")


@router.get("/place/{place_id}/stats")
async def get_place_review_stats(place_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_review_stats(db, place_id), "Review statistics retrieved successfully")


@router.get("/place/{place_id}/can-review")
async def can_review_place(
    place_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    can_review = services.can_user_review_place(db, place_id, current_user.id)
    return success_response({"canReview": can_review}, "Review eligibility checked")


@router.get("/user/{user_id}")
async def get_user_reviews(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    reviews = services.get_user_reviews(db, user_id, limit, offset)
    return success_response(serialize(ReviewResponse, reviews), "User reviews retrieved successfully")


@router.get("/user/{user_id}/stats")
async def get_user_review_stats(user_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_user_review_stats(db, user_id), "User review statistics retrieved successfully")


@router.get("/my")
async def get_my_reviews(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reviews = services.get_user_reviews(db, current_user.id, limit, offset)
    return success_response(serialize(ReviewResponse, reviews), "Your reviews retrieved successfully")


@router.get("/my/stats")
async def get_my_review_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.get_user_review_stats(db, current_user.id), "Your review statistics retrieved successfully")


@router.get("/{review_id}")
async def get_review(review_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_review_with_details(db, review_id), "Review retrieved successfully")


@router.put("/{review_id}")
async def update_review(
    review_id: int,
    review_in: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = services.update_review(db, review_id, current_user, review_in.model_dump(exclude_unset=True))
    return success_response(serialize(ReviewResponse, review), "Review updated successfully")


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.delete_review(db, review_id, current_user)
    return success_response({"id": review_id}, "Review deleted successfully")


@router.post("/{review_id}/helpful")
async def mark_review_helpful(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.mark_review_helpful(db, review_id, current_user.id), "Review marked as helpful")


@router.get("/{review_id}/helpful")
async def get_helpful_count(review_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_helpful_count(db, review_id), "Helpful count retrieved successfully")


@router.get("/{review_id}/helpful/check")
async def check_helpful(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    marked = services.has_user_marked_helpful(db, review_id, current_user.id)
    return success_response({"hasMarked": marked}, "Helpful status checked")
