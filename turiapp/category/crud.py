from typing import Optional, List, Dict, Any

from sqlalchemy import func, case, distinct, and_
from sqlalchemy.orm import Session

from ..core.repository import Repository
from ..place.models import Place
from .models import Category, place_categories

categories = Repository(Category)

ORDERING = (Category.sort_order.asc(), Category.name.asc())


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return categories.get(db, category_id)


def get_category_by_name(db: Session, name: str) -> Optional[Category]:
    return db.query(Category).filter(func.lower(Category.name) == name.strip().lower()).first()


def get_active_categories(db: Session) -> List[Category]:
    return categories.list(db, filters={"is_active": True}, order_by=ORDERING)


def get_parent_categories(db: Session) -> List[Category]:
    return (
        db.query(Category)
        .filter(Category.is_active.is_(True), Category.parent_id.is_(None))
        .order_by(*ORDERING)
        .all()
    )


def get_subcategories(db: Session, parent_id: int) -> List[Category]:
    return categories.list(db, filters={"parent_id": parent_id, "is_active": True}, order_by=ORDERING)


def search_categories(db: Session, term: str, limit: int = 20) -> List[Category]:
    pattern = f"%{term}%"
    return (
        db.query(Category)
        .filter(Category.is_active.is_(True), Category.name.ilike(pattern) | Category.description.ilike(pattern))
        .order_by(*ORDERING)
        .limit(limit)
        .all()
    )


def _with_place_count(db: Session):
    """
    Tên Function: _with_place_count

    1. Mô tả ngắn gọn:
    Truy vấn danh mục kèm số lượng địa điểm đang hoạt động.

    2. Mô tả công dụng:
    LEFT JOIN sang place_categories và places (chỉ places.is_active) rồi
    GROUP BY theo danh mục, để cả danh mục chưa có địa điểm nào cũng xuất
    hiện với place_count = 0.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database

    4. Giá trị trả về:
    - Query: trả về các cặp (Category, place_count)
    """
    place_count = func.count(distinct(Place.id)).label("place_count")
    return (
        db.query(Category, place_count)
        .outerjoin(place_categories, place_categories.c.category_id == Category.id)
        .outerjoin(Place, and_(Place.id == place_categories.c.place_id, Place.is_active.is_(True)))
        .filter(Category.is_active.is_(True))
        .group_by(Category.id)
    )


def get_categories_with_place_count(db: Session) -> List[tuple]:
    return _with_place_count(db).order_by(*ORDERING).all()


def get_popular_categories(db: Session, limit: int = 10) -> List[tuple]:
    avg_rating = func.avg(Place.average_rating)
    return (
        _with_place_count(db)
        .add_columns(avg_rating.label("avg_rating"))
        .filter(Category.parent_id.is_(None))
        .having(func.count(distinct(Place.id)) > 0)
        .order_by(func.count(distinct(Place.id)).desc(), avg_rating.desc())
        .limit(limit)
        .all()
    )


def get_category_stats(db: Session, category_id: int) -> Dict[str, Any]:
    row = (
        db.query(
            func.count(distinct(Place.id)).label("total_places"),
            func.count(distinct(case((Place.is_verified.is_(True), Place.id)))).label("verified_places"),
            func.count(distinct(case((Place.is_featured.is_(True), Place.id)))).label("featured_places"),
            func.avg(Place.average_rating).label("avg_rating"),
            func.sum(Place.total_reviews).label("total_reviews"),
            func.sum(Place.total_visits).label("total_visits"),
        )
        .select_from(place_categories)
        .join(Place, and_(Place.id == place_categories.c.place_id, Place.is_active.is_(True)))
        .filter(place_categories.c.category_id == category_id)
        .one()
    )
    return {
        "total_places": row.total_places or 0,
        "verified_places": row.verified_places or 0,
        "featured_places": row.featured_places or 0,
        "avg_rating": round(float(row.avg_rating), 2) if row.avg_rating is not None else 0,
        "total_reviews": int(row.total_reviews or 0),
        "total_visits": int(row.total_visits or 0),
    }


def count_place_links(db: Session, category_id: int) -> int:
    return (
        db.query(func.count())
        .select_from(place_categories)
        .filter(place_categories.c.category_id == category_id)
        .scalar()
    )


def count_children(db: Session, category_id: int) -> int:
    return categories.count(db, filters={"parent_id": category_id, "is_active": True})


def create_category(db: Session, data: Dict[str, Any]) -> Category:
    return categories.create(db, data)


def update_category(db: Session, category: Category, data: Dict[str, Any], commit: bool = True) -> Category:
    return categories.update(db, category, data, commit=commit)
