from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging

from ..core.database import get_db
from ..core.auth import get_current_user
from ..core.responses import success_response, serialize
from ..user.models import User
from ..user.schemas import UserSummary
from . import services
from .schemas import FavoriteCreate, BulkFavoriteRequest, FavoriteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_favorite(
    favorite_in: FavoriteCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorite = services.add_favorite(db, current_user.id, favorite_in.place_id)
    return success_response(serialize(FavoriteResponse, favorite), "Place added to favorites", status.HTTP_201_CREATED)


@router.post("/bulk")
async def bulk_add_favorites(
    bulk_in: BulkFavoriteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = services.bulk_add_favorites(db, current_user.id, bulk_in.place_ids)
    return success_response(result, "Bulk add completed")


@router.delete("/bulk")
async def bulk_remove_favorites(
    bulk_in: BulkFavoriteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = services.bulk_remove_favorites(db, current_user.id, bulk_in.place_ids)
    return success_response(result, "Bulk remove completed")


@router.get("/my")
async def get_my_favorites(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorites = services.get_user_favorites(db, current_user.id, limit, offset)
    return success_response(serialize(FavoriteResponse, favorites), "Favorites retrieved successfully")


@router.get("/my/count")
async def get_my_favorite_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    count = services.get_user_favorite_count(db, current_user.id)
    return success_response({"count": count}, "Favorite count retrieved successfully")


@router.get("/my/stats")
async def get_my_favorite_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.get_user_favorite_stats(db, current_user.id), "Favorite statistics retrieved successfully")


@router.get("/my/summary")
async def get_my_favorite_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.get_favorite_summary(db, current_user.id), "Favorite summary retrieved successfully")


@router.get("/my/search")
async def search_my_favorites(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorites = services.search_user_favorites(db, current_user.id, q, limit)
    return success_response(serialize(FavoriteResponse, favorites), "Favorites retrieved successfully")


@router.get("/my/trends")
async def get_my_favorite_trends(
    days: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response(services.get_favorite_trends(db, current_user.id, days), "Favorite trends retrieved successfully")


@router.get("/my/category/{category_id}")
async def get_my_favorites_by_category(
    category_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorites = services.get_user_favorites_by_category(db, current_user.id, category_id, limit, offset)
    return success_response(serialize(FavoriteResponse, favorites), "Favorites retrieved successfully")


@router.get("/my/price/{price_range}")
async def get_my_favorites_by_price_range(
    price_range: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    favorites = services.get_user_favorites_by_price_range(db, current_user.id, price_range, limit, offset)
    return success_response(serialize(FavoriteResponse, favorites), "Favorites retrieved successfully")


@router.get("/most-favorited")
async def get_most_favorited_places(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return success_response(services.get_most_favorited_places(db, limit), "Most favorited places retrieved successfully")


@router.get("/stats/categories")
async def get_category_favorite_stats(db: Session = Depends(get_db)):
    return success_response(services.get_category_favorite_stats(db), "Category favorite statistics retrieved successfully")


@router.get("/place/{place_id}")
async def get_place_favorites(
    place_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    users = services.get_place_favorites(db, place_id, limit, offset)
    return success_response(serialize(UserSummary, users), "Place favorites retrieved successfully")


@router.get("/place/{place_id}/count")
async def get_place_favorite_count(place_id: int, db: Session = Depends(get_db)):
    count = services.get_place_favorite_count(db, place_id)
    return success_response({"place_id": place_id, "count": count}, "Favorite count retrieved successfully")


@router.get("/place/{place_id}/check")
async def check_favorite(
    place_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success_response({"isFavorite": services.is_favorite(db, current_user.id, place_id)}, "Favorite status checked")


@router.post("/place/{place_id}/toggle")
async def toggle_favorite(
    place_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = services.toggle_favorite(db, current_user.id, place_id)
    return success_response(result, f"Favorite {result['action']}")


@router.delete("/place/{place_id}")
async def remove_favorite(
    place_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.remove_favorite(db, current_user.id, place_id)
    return success_response({"place_id": place_id}, "Place removed from favorites")
