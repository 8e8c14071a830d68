from typing import List, Dict, Any
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import AppError, ValidationError, NotFoundError, ConflictError
from ..core.repository import integrity_as_conflict
from ..core.responses import serialize
from ..category import crud as category_crud
from ..place import crud as place_crud
from ..place.models import PRICE_RANGES
from ..place.schemas import PlaceSummary
from . import crud
from .models import Favorite
from .schemas import FavoriteResponse, MAX_BULK_SIZE

logger = logging.getLogger(__name__)

ALREADY_FAVORITE = "Place is already in favorites"


def _require_place(db: Session, place_id: int) -> None:
    place = place_crud.get_place(db, place_id)
    if place is None or not place.is_active:
        raise NotFoundError("Place not found")


def add_favorite(db: Session, user_id: int, place_id: int) -> Favorite:
    _require_place(db, place_id)
    if crud.is_favorite(db, user_id, place_id):
        raise ConflictError(ALREADY_FAVORITE)
    # Unique (user_id, place_id) chặn trường hợp hai request chạy song song
    with integrity_as_conflict(db, ALREADY_FAVORITE):
        favorite = crud.create_favorite(db, user_id, place_id)
    logger.info(f"Place {place_id} added to favorites of user {user_id}")
    return favorite


def remove_favorite(db: Session, user_id: int, place_id: int) -> None:
    favorite = crud.get_favorite(db, user_id, place_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")
    crud.delete_favorite(db, favorite)
    logger.info(f"Place {place_id} removed from favorites of user {user_id}")


def toggle_favorite(db: Session, user_id: int, place_id: int) -> Dict[str, Any]:
    if crud.is_favorite(db, user_id, place_id):
        remove_favorite(db, user_id, place_id)
        return {"isFavorite": False, "action": "removed"}
    add_favorite(db, user_id, place_id)
    return {"isFavorite": True, "action": "added"}


def is_favorite(db: Session, user_id: int, place_id: int) -> bool:
    return crud.is_favorite(db, user_id, place_id)


def _run_bulk(db: Session, user_id: int, place_ids: List[int], operation) -> Dict[str, Any]:
    """
    Apply ``operation`` to every id independently.

    Each item commits or fails on its own; a failure is recorded as
    ``rejected`` and never stops the remaining items.
    """
    if not place_ids:
        raise ValidationError("Place IDs array is required")
    if len(place_ids) > MAX_BULK_SIZE:
        raise ValidationError(f"At most {MAX_BULK_SIZE} place IDs are allowed")

    results = []
    for place_id in place_ids:
        try:
            operation(db, user_id, place_id)
            results.append({"place_id": place_id, "status": "fulfilled"})
        except (AppError, IntegrityError) as exc:
            db.rollback()
            reason = exc.error if isinstance(exc, AppError) else "Database constraint violation"
            results.append({"place_id": place_id, "status": "rejected", "reason": reason})

    successful = sum(1 for result in results if result["status"] == "fulfilled")
    logger.info(f"Bulk favorites for user {user_id}: {successful}/{len(results)} succeeded")
    return {
        "successful": successful,
        "failed": len(results) - successful,
        "total": len(results),
        "results": results,
    }


def bulk_add_favorites(db: Session, user_id: int, place_ids: List[int]) -> Dict[str, Any]:
    return _run_bulk(db, user_id, place_ids, add_favorite)


def bulk_remove_favorites(db: Session, user_id: int, place_ids: List[int]) -> Dict[str, Any]:
    return _run_bulk(db, user_id, place_ids, remove_favorite)


def get_user_favorites(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Favorite]:
    return crud.get_user_favorites(db, user_id, limit, offset)


def get_place_favorites(db: Session, place_id: int, limit: int = 20, offset: int = 0):
    _require_place(db, place_id)
    return crud.get_place_favorites(db, place_id, limit, offset)


def get_user_favorite_count(db: Session, user_id: int) -> int:
    return crud.count_user_favorites(db, user_id)


def get_place_favorite_count(db: Session, place_id: int) -> int:
    _require_place(db, place_id)
    return crud.count_place_favorites(db, place_id)


def get_user_favorites_by_category(db: Session, user_id: int, category_id: int,
                                   limit: int = 20, offset: int = 0) -> List[Favorite]:
    if category_crud.get_category(db, category_id) is None:
        raise NotFoundError("Category not found")
    return crud.get_user_favorites_by_category(db, user_id, category_id, limit, offset)


def get_user_favorites_by_price_range(db: Session, user_id: int, price_range: str,
                                      limit: int = 20, offset: int = 0) -> List[Favorite]:
    if price_range not in PRICE_RANGES:
        raise ValidationError(f"Invalid price range. Must be one of: {', '.join(PRICE_RANGES)}")
    return crud.get_user_favorites_by_price_range(db, user_id, price_range, limit, offset)


def search_user_favorites(db: Session, user_id: int, term: str, limit: int = 20) -> List[Favorite]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_user_favorites(db, user_id, term.strip(), limit)


def get_most_favorited_places(db: Session, limit: int = 10) -> List[Dict[str, Any]]:
    result = []
    for place, favorite_count in crud.get_most_favorited_places(db, limit):
        data = serialize(PlaceSummary, place).model_dump()
        data["favorite_count"] = favorite_count
        result.append(data)
    return result


def get_user_favorite_stats(db: Session, user_id: int) -> Dict[str, Any]:
    return crud.get_user_favorite_stats(db, user_id)


def get_favorite_trends(db: Session, user_id: int, days: int = 30) -> List[Dict[str, Any]]:
    return crud.get_favorite_trends(db, user_id, days)


def get_category_favorite_stats(db: Session, user_id: int = None) -> List[Dict[str, Any]]:
    return crud.get_category_favorite_stats(db, user_id)


def get_favorite_summary(db: Session, user_id: int) -> Dict[str, Any]:
    return {
        "total": crud.count_user_favorites(db, user_id),
        "stats": crud.get_user_favorite_stats(db, user_id),
        "recent": serialize(FavoriteResponse, crud.get_user_favorites(db, user_id, limit=5)),
    }
