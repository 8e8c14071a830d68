from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.auth import get_current_user, get_optional_user
from ..core.responses import success_response, serialize
from ..user.models import User
from . import services
from .schemas import PersonCreate, PersonUpdate, VisibilityUpdate, ListItem, PersonResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/persons", tags=["Persons"])


@router.get("/me")
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.get_my_profile(db, current_user)
    return success_response(serialize(PersonResponse, person), "Person profile retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_profile(
    person_in: PersonCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.create_person(db, current_user, person_in.model_dump())
    return success_response(serialize(PersonResponse, person), "Person profile created successfully", status.HTTP_201_CREATED)


@router.put("/me")
async def update_my_profile(
    person_in: PersonUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.update_person(db, current_user, person_in.model_dump(exclude_unset=True))
    return success_response(serialize(PersonResponse, person), "Person profile updated successfully")


@router.put("/me/visibility")
async def update_visibility(
    visibility_in: VisibilityUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.set_visibility(db, current_user, visibility_in.is_public)
    return success_response(serialize(PersonResponse, person), "Profile visibility updated successfully")


@router.post("/me/interests")
async def add_interest(
    item: ListItem,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.add_interest(db, current_user, item.value)
    return success_response(serialize(PersonResponse, person), "Interest added successfully")


@router.delete("/me/interests")
async def remove_interest(
    item: ListItem,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.remove_interest(db, current_user, item.value)
    return success_response(serialize(PersonResponse, person), "Interest removed successfully")


@router.post("/me/languages")
async def add_language(
    item: ListItem,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.add_language(db, current_user, item.value)
    return success_response(serialize(PersonResponse, person), "Language added successfully")


@router.delete("/me/languages")
async def remove_language(
    item: ListItem,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = services.remove_language(db, current_user, item.value)
    return success_response(serialize(PersonResponse, person), "Language removed successfully")


@router.get("/public")
async def get_public_profiles(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.get_public_profiles(db, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Public profiles retrieved successfully")


@router.get("/location")
async def get_profiles_by_location(
    country: str = Query(..., min_length=1),
    city: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.get_profiles_by_location(db, country, city, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Profiles retrieved successfully")


@router.get("/interest/{interest}")
async def get_profiles_by_interest(
    interest: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.get_profiles_by_interest(db, interest, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Profiles retrieved successfully")


@router.get("/language/{language}")
async def get_profiles_by_language(
    language: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.get_profiles_by_language(db, language, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Profiles retrieved successfully")


@router.get("/nationality/{nationality}")
async def get_profiles_by_nationality(
    nationality: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.get_profiles_by_nationality(db, nationality, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Profiles retrieved successfully")


@router.get("/search")
async def search_profiles(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    persons = services.search_profiles(db, q, limit, offset)
    return success_response(serialize(PersonResponse, persons), "Profiles retrieved successfully")


@router.get("/popular")
async def get_popular_profiles(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    popular = [
        {"profile": serialize(PersonResponse, item["person"]), "review_count": item["review_count"]}
        for item in services.get_popular_profiles(db, limit)
    ]
    return success_response(popular, "Popular profiles retrieved successfully")


@router.get("/stats")
async def get_person_stats(db: Session = Depends(get_db)):
    return success_response(services.get_person_stats(db), "Profile statistics retrieved successfully")


@router.get("/stats/locations")
async def get_location_stats(db: Session = Depends(get_db)):
    return success_response(services.get_location_stats(db), "Location statistics retrieved successfully")


@router.get("/stats/nationalities")
async def get_nationality_stats(db: Session = Depends(get_db)):
    return success_response(services.get_nationality_stats(db), "Nationality statistics retrieved successfully")


@router.get("/user/{user_id}")
async def get_profile_by_user(
    user_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    person = services.get_person_by_user_id(db, user_id, current_user)
    return success_response(serialize(PersonResponse, person), "Person profile retrieved successfully")
