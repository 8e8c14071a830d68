from typing import List, Dict, Any, Optional, Tuple
import logging
import math

from sqlalchemy.orm import Session

from ..core.auth import is_admin
from ..core.database import transaction
from ..core.exceptions import ValidationError, NotFoundError, ForbiddenError
from ..core.responses import serialize
from ..category import crud as category_crud
from ..favorite import crud as favorite_crud
from ..review import crud as review_crud
from ..user.models import User
from . import crud
from .models import Place, PRICE_RANGES
from .schemas import PlaceResponse

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def get_places(db: Session, **filters) -> List[Place]:
    return crud.get_places(db, **filters)


def get_place(db: Session, place_id: int) -> Place:
    place = crud.get_place(db, place_id)
    if place is None:
        raise NotFoundError("Place not found")
    return place


def _longitude_ranges(longitude: float, latitude: float, lat_delta: float) -> List[Tuple[float, float]]:
    """Longitude ranges of the search box, split in two when it crosses ±180."""
    if abs(latitude) + lat_delta >= 90:
        # Vòng tròn chứa cực: mọi kinh độ đều có thể nằm trong bán kính
        return [(-180.0, 180.0)]
    lng_delta = lat_delta / math.cos(math.radians(latitude))
    if lng_delta >= 180:
        return [(-180.0, 180.0)]
    low, high = longitude - lng_delta, longitude + lng_delta
    if low < -180:
        return [(low + 360, 180.0), (-180.0, high)]
    if high > 180:
        return [(low, 180.0), (-180.0, high - 360)]
    return [(low, high)]


def get_nearby_places(
    db: Session, latitude: float, longitude: float, radius_km: float = 10, limit: int = 20
) -> List[Dict[str, Any]]:
    """
    Active places within ``radius_km`` of a point, nearest first.

    A bounding box narrows the candidates in SQL, the exact haversine
    distance decides the final set.
    """
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ValidationError("Invalid coordinates")
    if radius_km <= 0:
        raise ValidationError("Radius must be positive")

    lat_delta = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat, max_lat = latitude - lat_delta, latitude + lat_delta
    candidates = crud.get_places_in_box(db, min_lat, max_lat, _longitude_ranges(longitude, latitude, lat_delta))
    nearby = []
    for place in candidates:
        distance = haversine_km(latitude, longitude, place.latitude, place.longitude)
        if distance <= radius_km:
            nearby.append((distance, place))
    nearby.sort(key=lambda item: (item[0], item[1].id))

    result = []
    for distance, place in nearby[:limit]:
        data = serialize(PlaceResponse, place).model_dump()
        data["distance_km"] = round(distance, 3)
        result.append(data)
    return result


def get_popular_places(db: Session, limit: int = 10, category_id: Optional[int] = None) -> List[Place]:
    return crud.get_popular_places(db, limit, category_id)


def get_featured_places(db: Session, limit: int = 10) -> List[Place]:
    return crud.get_places(db, is_featured=True, limit=limit)


def get_verified_places(db: Session, limit: int = 20, offset: int = 0) -> List[Place]:
    return crud.get_places(db, is_verified=True, limit=limit, offset=offset)


def get_places_by_category(db: Session, category_id: int, limit: int = 20, offset: int = 0) -> List[Place]:
    if category_crud.get_category(db, category_id) is None:
        raise NotFoundError("Category not found")
    return crud.get_places(db, category_id=category_id, limit=limit, offset=offset)


def get_places_by_price_range(db: Session, price_range: str, limit: int = 20, offset: int = 0) -> List[Place]:
    if price_range not in PRICE_RANGES:
        raise ValidationError(f"Invalid price range. Must be one of: {', '.join(PRICE_RANGES)}")
    return crud.get_places(db, price_range=price_range, limit=limit, offset=offset)


def search_places(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Place]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.get_places(db, search=term.strip(), limit=limit, offset=offset)


def _check_categories(db: Session, category_ids) -> None:
    for category_id in category_ids or []:
        category = category_crud.get_category(db, category_id)
        if category is None or not category.is_active:
            raise NotFoundError(f"Category {category_id} not found")


def _flatten(data: Dict[str, Any]) -> Dict[str, Any]:
    coordinates = data.pop("coordinates", None)
    if coordinates is not None:
        data["latitude"] = coordinates["latitude"]
        data["longitude"] = coordinates["longitude"]
    return data


def create_place(db: Session, data: Dict[str, Any], user: User) -> Place:
    """
    Create a place owned by ``user`` together with its category links,
    in a single transaction.
    """
    category_ids = data.pop("category_ids", None) or []
    if not data.get("name") or not data.get("address") or not data.get("coordinates"):
        raise ValidationError("Name, address, and coordinates are required")
    _check_categories(db, category_ids)

    data = _flatten(data)
    data["created_by"] = user.id
    with transaction(db):
        place = crud.create_place(db, data, category_ids)
    db.refresh(place)
    logger.info(f"Place created: {place.id} by user {user.id}")
    return place


def _owned_place(db: Session, place_id: int, user: User, error: str) -> Place:
    place = get_place(db, place_id)
    if place.created_by != user.id and not is_admin(user):
        logger.warning(f"User {user.id} tried to modify place {place_id} owned by {place.created_by}")
        raise ForbiddenError(error)
    return place


def update_place(db: Session, place_id: int, data: Dict[str, Any], user: User) -> Place:
    place = _owned_place(db, place_id, user, "Unauthorized to update this place")
    category_ids = data.pop("category_ids", None)
    _check_categories(db, category_ids)

    data = _flatten(data)
    with transaction(db):
        crud.update_place(db, place, data, category_ids)
    db.refresh(place)
    logger.info(f"Place updated: {place_id} by user {user.id}")
    return place


def delete_place(db: Session, place_id: int, user: User) -> None:
    place = _owned_place(db, place_id, user, "Unauthorized to delete this place")
    crud.delete_place(db, place)
    logger.info(f"Place deleted: {place_id} by user {user.id}")


def get_place_stats(db: Session, place_id: int) -> Dict[str, Any]:
    place = get_place(db, place_id)
    stats = review_crud.get_place_review_stats(db, place_id)
    stats.update({
        "place_id": place.id,
        "name": place.name,
        "total_visits": place.total_visits,
        "total_favorites": favorite_crud.count_place_favorites(db, place_id),
    })
    return stats


def get_place_categories(db: Session, place_id: int):
    get_place(db, place_id)
    return crud.get_place_categories(db, place_id)


def add_category_to_place(db: Session, place_id: int, category_id: int, user: User):
    _owned_place(db, place_id, user, "Unauthorized to update this place")
    _check_categories(db, [category_id])
    # Bỏ qua nếu liên kết đã tồn tại
    if not crud.has_category(db, place_id, category_id):
        with transaction(db):
            crud.link_categories(db, place_id, [category_id])
    return crud.get_place_categories(db, place_id)


def remove_category_from_place(db: Session, place_id: int, category_id: int, user: User):
    _owned_place(db, place_id, user, "Unauthorized to update this place")
    if not crud.remove_category(db, place_id, category_id):
        raise NotFoundError("Category is not assigned to this place")
    return crud.get_place_categories(db, place_id)


def record_visit(db: Session, place_id: int) -> Place:
    place = get_place(db, place_id)
    crud.increment_visit_count(db, place_id)
    db.refresh(place)
    return place


def set_verified(db: Session, place_id: int, value: bool = True) -> Place:
    place = get_place(db, place_id)
    crud.places.update(db, place, {"is_verified": value})
    logger.info(f"Place {place_id} verified={value}")
    return place


def set_featured(db: Session, place_id: int, value: bool = True) -> Place:
    place = get_place(db, place_id)
    crud.places.update(db, place, {"is_featured": value})
    logger.info(f"Place {place_id} featured={value}")
    return place
