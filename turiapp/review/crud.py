from typing import Optional, List, Dict, Any

from sqlalchemy import or_, func, case, update
from sqlalchemy.orm import Session

from ..core.repository import Repository
from ..comment.models import Comment
from .models import Review, ReviewHelpful

reviews = Repository(Review)
helpful_votes = Repository(ReviewHelpful)

NEWEST_FIRST = (Review.created_at.desc(), Review.id.desc())


def get_review(db: Session, review_id: int) -> Optional[Review]:
    return reviews.get(db, review_id)


def get_review_by_place_and_user(db: Session, place_id: int, user_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.place_id == place_id, Review.user_id == user_id).first()


def _public():
    return Review.is_public.is_(True)


def get_place_reviews(
    db: Session, place_id: int, rating: Optional[int] = None, limit: int = 20, offset: int = 0
) -> List[Review]:
    query = db.query(Review).filter(Review.place_id == place_id, _public())
    if rating is not None:
        query = query.filter(Review.rating == rating)
    return query.order_by(*NEWEST_FIRST).offset(offset).limit(limit).all()


def get_user_reviews(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.user_id == user_id, _public())
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_recent_reviews(db: Session, limit: int = 20) -> List[Review]:
    return db.query(Review).filter(_public()).order_by(*NEWEST_FIRST).limit(limit).all()


def get_top_rated_reviews(db: Session, limit: int = 20) -> List[Review]:
    return (
        db.query(Review)
        .filter(_public(), Review.rating >= 4)
        .order_by(Review.rating.desc(), Review.helpful_count.desc(), *NEWEST_FIRST)
        .limit(limit)
        .all()
    )


def get_reviews_by_rating(db: Session, rating: int, limit: int = 20, offset: int = 0) -> List[Review]:
    return (
        db.query(Review)
        .filter(_public(), Review.rating == rating)
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def search_reviews(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Review]:
    pattern = f"%{term}%"
    return (
        db.query(Review)
        .filter(_public(), or_(Review.title.ilike(pattern), Review.content.ilike(pattern)))
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def count_comments(db: Session, review_id: int) -> int:
    return (
        db.query(func.count(Comment.id))
        .filter(Comment.review_id == review_id, Comment.is_public.is_(True))
        .scalar()
        or 0
    )


def create_review(db: Session, data: Dict[str, Any]) -> Review:
    """Insert without committing: place aggregates are refreshed in the same transaction."""
    return reviews.create(db, data, commit=False)


def _rating_breakdown():
    return [
        func.count(Review.id).label("total"),
        func.avg(Review.rating).label("average"),
        func.sum(case((Review.rating == 5, 1), else_=0)).label("five_star"),
        func.sum(case((Review.rating == 4, 1), else_=0)).label("four_star"),
        func.sum(case((Review.rating == 3, 1), else_=0)).label("three_star"),
        func.sum(case((Review.rating == 2, 1), else_=0)).label("two_star"),
        func.sum(case((Review.rating == 1, 1), else_=0)).label("one_star"),
    ]


def get_place_review_stats(db: Session, place_id: int) -> Dict[str, Any]:
    """
    Tên Function: get_place_review_stats

    1. Mô tả ngắn gọn:
    Thống kê đánh giá của một địa điểm.

    2. Mô tả công dụng:
    Đếm tổng số review công khai, điểm trung bình và số lượng theo từng
    mức sao (1 đến 5) trong một truy vấn.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - place_id (int): ID địa điểm

    4. Giá trị trả về:
    - Dict: total_reviews, average_rating, five_star ... one_star
    """
    row = db.query(*_rating_breakdown()).filter(Review.place_id == place_id, _public()).one()
    return {
        "total_reviews": row.total or 0,
        "average_rating": round(float(row.average), 2) if row.average else 0,
        "five_star": int(row.five_star or 0),
        "four_star": int(row.four_star or 0),
        "three_star": int(row.three_star or 0),
        "two_star": int(row.two_star or 0),
        "one_star": int(row.one_star or 0),
    }


def get_user_review_stats(db: Session, user_id: int) -> Dict[str, Any]:
    row = (
        db.query(*_rating_breakdown(), func.sum(Review.helpful_count).label("helpful"))
        .filter(Review.user_id == user_id, _public())
        .one()
    )
    return {
        "total_reviews": row.total or 0,
        "average_rating_given": round(float(row.average), 2) if row.average else 0,
        "five_star_given": int(row.five_star or 0),
        "four_star_given": int(row.four_star or 0),
        "three_star_given": int(row.three_star or 0),
        "two_star_given": int(row.two_star or 0),
        "one_star_given": int(row.one_star or 0),
        "total_helpful_received": int(row.helpful or 0),
    }


def has_marked_helpful(db: Session, review_id: int, user_id: int) -> bool:
    return helpful_votes.exists(db, {"review_id": review_id, "user_id": user_id})


def add_helpful_vote(db: Session, review_id: int, user_id: int) -> None:
    """Record the vote and bump the counter. No commit."""
    helpful_votes.create(db, {"review_id": review_id, "user_id": user_id}, commit=False)
    db.execute(
        update(Review).where(Review.id == review_id).values(helpful_count=Review.helpful_count + 1)
    )
