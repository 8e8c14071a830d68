from typing import Optional, List, Dict, Any, Iterable

from sqlalchemy import or_, func, insert, delete, update
from sqlalchemy.orm import Session

from ..core.repository import Repository
from ..category.models import Category, place_categories
from ..review.models import Review
from .models import Place

places = Repository(Place)

# Địa điểm nổi bật trước, sau đó theo điểm đánh giá
DEFAULT_ORDER = (Place.is_featured.desc(), Place.average_rating.desc(), Place.id.asc())


def get_place(db: Session, place_id: int) -> Optional[Place]:
    return places.get(db, place_id)


def get_places(
    db: Session,
    is_active: Optional[bool] = True,
    is_verified: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    price_range: Optional[str] = None,
    category_id: Optional[int] = None,
    min_rating: Optional[float] = None,
    max_rating: Optional[float] = None,
    search: Optional[str] = None,
    created_by: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Place]:
    """
    Tên Function: get_places

    1. Mô tả ngắn gọn:
    Lấy danh sách địa điểm theo bộ lọc.

    2. Mô tả công dụng:
    Kết hợp các điều kiện lọc (trạng thái, giá, danh mục, khoảng điểm
    đánh giá, từ khóa) thành một truy vấn duy nhất. Các tham số None được
    bỏ qua. Kết quả sắp xếp nổi bật trước, rồi theo average_rating giảm dần.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - is_active, is_verified, is_featured (bool): lọc theo cờ trạng thái
    - price_range (str): free | low | medium | high | luxury
    - category_id (int): chỉ lấy địa điểm thuộc danh mục này
    - min_rating, max_rating (float): khoảng average_rating
    - search (str): tìm trong name, description, short_description
    - created_by (int): lọc theo người tạo
    - limit, offset (int): phân trang

    4. Giá trị trả về:
    - List[Place]: danh sách địa điểm
    """
    query = db.query(Place)
    if is_active is not None:
        query = query.filter(Place.is_active.is_(is_active))
    if is_verified is not None:
        query = query.filter(Place.is_verified.is_(is_verified))
    if is_featured is not None:
        query = query.filter(Place.is_featured.is_(is_featured))
    if price_range:
        query = query.filter(Place.price_range == price_range)
    if category_id is not None:
        query = query.join(place_categories, place_categories.c.place_id == Place.id).filter(
            place_categories.c.category_id == category_id
        )
    if min_rating is not None:
        query = query.filter(Place.average_rating >= min_rating)
    if max_rating is not None:
        query = query.filter(Place.average_rating <= max_rating)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Place.name.ilike(pattern),
                Place.description.ilike(pattern),
                Place.short_description.ilike(pattern),
            )
        )
    if created_by is not None:
        query = query.filter(Place.created_by == created_by)
    return query.order_by(*DEFAULT_ORDER).offset(offset).limit(limit).all()


def get_places_in_box(
    db: Session, min_lat: float, max_lat: float, lng_ranges: Iterable[tuple]
) -> List[Place]:
    """Active places inside a latitude band and any of the longitude ranges."""
    return (
        db.query(Place)
        .filter(
            Place.is_active.is_(True),
            Place.latitude.between(min_lat, max_lat),
            or_(*[Place.longitude.between(low, high) for low, high in lng_ranges]),
        )
        .all()
    )


def get_popular_places(db: Session, limit: int = 10, category_id: Optional[int] = None) -> List[Place]:
    query = db.query(Place).filter(Place.is_active.is_(True))
    if category_id is not None:
        query = query.join(place_categories, place_categories.c.place_id == Place.id).filter(
            place_categories.c.category_id == category_id
        )
    return (
        query.order_by(
            Place.total_reviews.desc(),
            Place.average_rating.desc(),
            Place.total_visits.desc(),
            Place.id.asc(),
        )
        .limit(limit)
        .all()
    )


def create_place(db: Session, data: Dict[str, Any], category_ids: Iterable[int]) -> Place:
    """Insert the place and its category links. The caller owns the transaction."""
    place = places.create(db, data, commit=False)
    link_categories(db, place.id, category_ids)
    return place


def update_place(
    db: Session, place: Place, data: Dict[str, Any], category_ids: Optional[Iterable[int]] = None
) -> Place:
    """Update fields and, when ``category_ids`` is given, replace the category set. No commit."""
    places.update(db, place, data, commit=False)
    if category_ids is not None:
        db.execute(delete(place_categories).where(place_categories.c.place_id == place.id))
        link_categories(db, place.id, category_ids)
    return place


def delete_place(db: Session, place: Place) -> None:
    places.delete(db, place)


def link_categories(db: Session, place_id: int, category_ids: Iterable[int]) -> None:
    rows = [{"place_id": place_id, "category_id": category_id} for category_id in dict.fromkeys(category_ids)]
    if rows:
        db.execute(insert(place_categories), rows)


def get_place_categories(db: Session, place_id: int) -> List[Category]:
    return (
        db.query(Category)
        .join(place_categories, place_categories.c.category_id == Category.id)
        .filter(place_categories.c.place_id == place_id, Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.name)
        .all()
    )


def has_category(db: Session, place_id: int, category_id: int) -> bool:
    return db.query(place_categories).filter(
        place_categories.c.place_id == place_id,
        place_categories.c.category_id == category_id,
    ).first() is not None


def remove_category(db: Session, place_id: int, category_id: int) -> int:
    result = db.execute(
        delete(place_categories).where(
            place_categories.c.place_id == place_id,
            place_categories.c.category_id == category_id,
        )
    )
    db.commit()
    return result.rowcount


def increment_visit_count(db: Session, place_id: int) -> None:
    db.execute(update(Place).where(Place.id == place_id).values(total_visits=Place.total_visits + 1))
    db.commit()


def refresh_review_aggregates(db: Session, place_id: int) -> None:
    """Recompute average_rating and total_reviews from public reviews. No commit."""
    total, average = (
        db.query(func.count(Review.id), func.avg(Review.rating))
        .filter(Review.place_id == place_id, Review.is_public.is_(True))
        .one()
    )
    db.execute(
        update(Place)
        .where(Place.id == place_id)
        .values(total_reviews=total or 0, average_rating=round(float(average), 2) if average else 0)
    )

