from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..core.repository import Repository
from ..category.models import Category, place_categories
from ..place.models import Place, PRICE_RANGES
from ..user.models import User
from .models import Favorite

favorites = Repository(Favorite)

NEWEST_FIRST = (Favorite.created_at.desc(), Favorite.id.desc())


def get_favorite(db: Session, user_id: int, place_id: int) -> Optional[Favorite]:
    return db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.place_id == place_id).first()


def is_favorite(db: Session, user_id: int, place_id: int) -> bool:
    return get_favorite(db, user_id, place_id) is not None


def create_favorite(db: Session, user_id: int, place_id: int) -> Favorite:
    return favorites.create(db, {"user_id": user_id, "place_id": place_id})


def delete_favorite(db: Session, favorite: Favorite) -> None:
    favorites.delete(db, favorite)


def _user_favorites(db: Session, user_id: int):
    return (
        db.query(Favorite)
        .join(Place, Place.id == Favorite.place_id)
        .filter(Favorite.user_id == user_id, Place.is_active.is_(True))
    )


def get_user_favorites(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Favorite]:
    return _user_favorites(db, user_id).order_by(*NEWEST_FIRST).offset(offset).limit(limit).all()


def get_user_favorites_by_category(db: Session, user_id: int, category_id: int,
                                   limit: int = 20, offset: int = 0) -> List[Favorite]:
    return (
        _user_favorites(db, user_id)
        .join(place_categories, place_categories.c.place_id == Place.id)
        .filter(place_categories.c.category_id == category_id)
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_user_favorites_by_price_range(db: Session, user_id: int, price_range: str,
                                      limit: int = 20, offset: int = 0) -> List[Favorite]:
    return (
        _user_favorites(db, user_id)
        .filter(Place.price_range == price_range)
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def search_user_favorites(db: Session, user_id: int, term: str, limit: int = 20) -> List[Favorite]:
    pattern = f"%{term}%"
    return (
        _user_favorites(db, user_id)
        .filter(or_(Place.name.ilike(pattern), Place.description.ilike(pattern), Place.address.ilike(pattern)))
        .order_by(*NEWEST_FIRST)
        .limit(limit)
        .all()
    )


def get_place_favorites(db: Session, place_id: int, limit: int = 20, offset: int = 0) -> List[User]:
    """Users who saved a place, newest first."""
    return (
        db.query(User)
        .join(Favorite, Favorite.user_id == User.id)
        .filter(Favorite.place_id == place_id, User.is_active.is_(True))
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def count_user_favorites(db: Session, user_id: int) -> int:
    return _user_favorites(db, user_id).count()


def count_place_favorites(db: Session, place_id: int) -> int:
    return favorites.count(db, {"place_id": place_id})


def get_most_favorited_places(db: Session, limit: int = 10) -> List[tuple]:
    favorite_count = func.count(Favorite.id).label("favorite_count")
    return (
        db.query(Place, favorite_count)
        .join(Favorite, Favorite.place_id == Place.id)
        .filter(Place.is_active.is_(True))
        .group_by(Place.id)
        .order_by(favorite_count.desc(), Place.average_rating.desc(), Place.id.asc())
        .limit(limit)
        .all()
    )


def get_user_favorite_stats(db: Session, user_id: int) -> Dict[str, Any]:
    """
    Tên Function: get_user_favorite_stats

    1. Mô tả ngắn gọn:
    Thống kê địa điểm yêu thích của người dùng theo mức giá.

    2. Mô tả công dụng:
    Đếm tổng số địa điểm yêu thích (chỉ địa điểm đang hoạt động), số lượng
    theo từng price_range và điểm trung bình của các địa điểm đó.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - user_id (int): ID người dùng

    4. Giá trị trả về:
    - Dict: total_favorites, by_price_range, average_place_rating
    """
    rows = (
        db.query(Place.price_range, func.count(Favorite.id), func.avg(Place.average_rating))
        .join(Favorite, Favorite.place_id == Place.id)
        .filter(Favorite.user_id == user_id, Place.is_active.is_(True))
        .group_by(Place.price_range)
        .all()
    )
    by_price = {price_range: 0 for price_range in PRICE_RANGES}
    total = 0
    weighted_rating = 0.0
    for price_range, count, avg_rating in rows:
        by_price[price_range] = count
        total += count
        weighted_rating += float(avg_rating or 0) * count
    return {
        "total_favorites": total,
        "by_price_range": by_price,
        "average_place_rating": round(weighted_rating / total, 2) if total else 0,
    }


def get_favorite_trends(db: Session, user_id: int, days: int = 30) -> List[Dict[str, Any]]:
    since = datetime.utcnow() - timedelta(days=days)
    day = func.date(Favorite.created_at).label("day")
    rows = (
        db.query(day, func.count(Favorite.id))
        .filter(Favorite.user_id == user_id, Favorite.created_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )
    return [{"date": str(row[0]), "count": row[1]} for row in rows]


def get_category_favorite_stats(db: Session, user_id: Optional[int] = None) -> List[Dict[str, Any]]:
    query = (
        db.query(Category.id, Category.name, func.count(Favorite.id).label("favorite_count"))
        .join(place_categories, place_categories.c.category_id == Category.id)
        .join(Favorite, Favorite.place_id == place_categories.c.place_id)
        .filter(Category.is_active.is_(True))
    )
    if user_id is not None:
        query = query.filter(Favorite.user_id == user_id)
    rows = query.group_by(Category.id, Category.name).order_by(func.count(Favorite.id).desc(), Category.name).all()
    return [{"category_id": row[0], "name": row[1], "favorite_count": row[2]} for row in rows]
