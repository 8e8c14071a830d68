from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.auth import get_current_user, require_roles
from ..core.responses import success_response, serialize
from ..category.schemas import CategoryResponse
from ..user.models import User
from . import services
from .schemas import PlaceCreate, PlaceUpdate, PlaceResponse, FlagUpdate, PriceRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/places", tags=["Places"])


@router.get("")
async def get_places(
    is_active: Optional[bool] = Query(True),
    is_verified: Optional[bool] = Query(None),
    is_featured: Optional[bool] = Query(None),
    price_range: Optional[PriceRange] = Query(None),
    category_id: Optional[int] = Query(None, gt=0),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    max_rating: Optional[float] = Query(None, ge=0, le=5),
    search: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    places = services.get_places(
        db,
        is_active=is_active,
        is_verified=is_verified,
        is_featured=is_featured,
        price_range=price_range,
        category_id=category_id,
        min_rating=min_rating,
        max_rating=max_rating,
        search=search,
        limit=limit,
        offset=offset,
    )
    return success_response(serialize(PlaceResponse, places), "Places retrieved successfully")


@router.get("/nearby")
async def get_nearby_places(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(10, gt=0, le=1000, description="Radius in kilometres"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    places = services.get_nearby_places(db, latitude, longitude, radius, limit)
    return success_response(places, "Nearby places retrieved successfully")


@router.get("/popular")
async def get_popular_places(
    limit: int = Query(10, ge=1, le=100),
    category_id: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    places = services.get_popular_places(db, limit, category_id)
    return success_response(serialize(PlaceResponse, places), "Popular places retrieved successfully")


@router.get("/featured")
async def get_featured_places(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    places = services.get_featured_places(db, limit)
    return success_response(serialize(PlaceResponse, places), "Featured places retrieved successfully")


@router.get("/verified")
async def get_verified_places(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    places = services.get_verified_places(db, limit, offset)
    return success_response(serialize(PlaceResponse, places), "Verified places retrieved successfully")


@router.get("/search")
async def search_places(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    places = services.search_places(db, q, limit, offset)
    return success_response(serialize(PlaceResponse, places), "Places retrieved successfully")


@router.get("/category/{category_id}")
async def get_places_by_category(
    category_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    places = services.get_places_by_category(db, category_id, limit, offset)
    return success_response(serialize(PlaceResponse, places), "Places retrieved successfully")


@router.get("/price/{price_range}")
async def get_places_by_price_range(
    price_range: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    places = services.get_places_by_price_range(db, price_range, limit, offset)
    return success_response(serialize(PlaceResponse, places), "Places retrieved successfully")


@router.get("/{place_id}")
async def get_place(place_id: int, db: Session = Depends(get_db)):
    place = services.get_place(db, place_id)
    return success_response(serialize(PlaceResponse, place), "Place retrieved successfully")


@router.get("/{place_id}/stats")
async def get_place_stats(place_id: int, db: Session = Depends(get_db)):
    return success_response(services.get_place_stats(db, place_id), "Place statistics retrieved successfully")


@router.get("/{place_id}/categories")
async def get_place_categories(place_id: int, db: Session = Depends(get_db)):
    categories = services.get_place_categories(db, place_id)
    return success_response(serialize(CategoryResponse, categories), "Place categories retrieved successfully")


@router.post("/{place_id}/categories/{category_id}")
async def add_category_to_place(
    place_id: int,
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    categories = services.add_category_to_place(db, place_id, category_id, current_user)
    return success_response(serialize(CategoryResponse, categories), "Category added to place")


@router.delete("/{place_id}/categories/{category_id}")
async def remove_category_from_place(
    place_id: int,
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    categories = services.remove_category_from_place(db, place_id, category_id, current_user)
    return success_response(serialize(CategoryResponse, categories), "Category removed from place")


@router.post("/{place_id}/visit")
async def record_visit(place_id: int, db: Session = Depends(get_db)):
    place = services.record_visit(db, place_id)
    return success_response({"id": place.id, "total_visits": place.total_visits}, "Visit recorded successfully")


@router.put("/{place_id}/verify")
async def verify_place(
    place_id: int,
    flag: FlagUpdate = FlagUpdate(),
    current_user: User = Depends(require_roles("admin", "moderator")),
    db: Session = Depends(get_db),
):
    place = services.set_verified(db, place_id, flag.value)
    return success_response(serialize(PlaceResponse, place), "Place verification updated")


@router.put("/{place_id}/feature")
async def feature_place(
    place_id: int,
    flag: FlagUpdate = FlagUpdate(),
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    place = services.set_featured(db, place_id, flag.value)
    return success_response(serialize(PlaceResponse, place), "Place feature flag updated")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_place(
    place_in: PlaceCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    place = services.create_place(db, place_in.model_dump(), current_user)
    return success_response(serialize(PlaceResponse, place), "Place created successfully", status.HTTP_201_CREATED)


@router.put("/{place_id}")
async def update_place(
    place_id: int,
    place_in: PlaceUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    place = services.update_place(db, place_id, place_in.model_dump(exclude_unset=True), current_user)
    return success_response(serialize(PlaceResponse, place), "Place updated successfully")


@router.delete("/{place_id}")
async def delete_place(
    place_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.delete_place(db, place_id, current_user)
    return success_response({"id": place_id}, "Place deleted successfully")
