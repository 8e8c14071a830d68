from typing import List, Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from ..core.auth import is_admin
from ..core.exceptions import ValidationError, NotFoundError, ConflictError
from ..core.repository import integrity_as_conflict
from ..user import crud as user_crud
from ..user.models import User
from . import crud
from .models import Person

logger = logging.getLogger(__name__)

PROFILE_EXISTS = "Person profile already exists for this user"
PROFILE_NOT_FOUND = "Person profile not found"


def _flatten(data: Dict[str, Any]) -> Dict[str, Any]:
    if "coordinates" in data:
        coordinates = data.pop("coordinates")
        data["latitude"] = coordinates["latitude"] if coordinates else None
        data["longitude"] = coordinates["longitude"] if coordinates else None
    return data


def _matches(values: Optional[List[str]], wanted: str) -> bool:
    wanted = wanted.strip().lower()
    return any(value.lower() == wanted for value in values or [])


def get_person_by_user_id(db: Session, user_id: int, viewer: Optional[User] = None) -> Person:
    """
    Profile of ``user_id``. Private profiles are only visible to their
    owner and to admins.
    """
    person = crud.get_person_by_user_id(db, user_id)
    if person is None:
        raise NotFoundError(PROFILE_NOT_FOUND)
    if not person.is_public:
        if viewer is None or (viewer.id != person.user_id and not is_admin(viewer)):
            raise NotFoundError(PROFILE_NOT_FOUND)
    return person


def get_my_profile(db: Session, user: User) -> Person:
    person = crud.get_person_by_user_id(db, user.id)
    if person is None:
        raise NotFoundError(PROFILE_NOT_FOUND)
    return person


def get_public_profiles(db: Session, limit: int = 20, offset: int = 0) -> List[Person]:
    return crud.get_public_profiles(db, limit, offset)


def get_profiles_by_location(db: Session, country: str, city: Optional[str] = None,
                             limit: int = 20, offset: int = 0) -> List[Person]:
    if not country or not country.strip():
        raise ValidationError("Country is required")
    return crud.get_profiles_by_location(db, country.strip(), city.strip() if city else None, limit, offset)


def get_profiles_by_interest(db: Session, interest: str, limit: int = 20, offset: int = 0) -> List[Person]:
    # JSON columns are matched in Python so MySQL and SQLite behave the same
    matches = [p for p in crud.get_all_public_profiles(db) if _matches(p.interests, interest)]
    return matches[offset:offset + limit]


def get_profiles_by_language(db: Session, language: str, limit: int = 20, offset: int = 0) -> List[Person]:
    matches = [p for p in crud.get_all_public_profiles(db) if _matches(p.languages, language)]
    return matches[offset:offset + limit]


def get_profiles_by_nationality(db: Session, nationality: str, limit: int = 20, offset: int = 0) -> List[Person]:
    return crud.get_profiles_by_nationality(db, nationality.strip(), limit, offset)


def search_profiles(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Person]:
    if not term or not term.strip():
        raise ValidationError("Search term is required")
    return crud.search_profiles(db, term.strip(), limit, offset)


def get_popular_profiles(db: Session, limit: int = 10) -> List[Dict[str, Any]]:
    return [
        {"person": person, "review_count": review_count}
        for person, review_count in crud.get_popular_profiles(db, limit)
    ]


def get_person_stats(db: Session) -> Dict[str, Any]:
    return crud.get_person_stats(db)


def get_location_stats(db: Session) -> List[Dict[str, Any]]:
    return crud.get_location_stats(db)


def get_nationality_stats(db: Session) -> List[Dict[str, Any]]:
    return crud.get_nationality_stats(db)


def create_person(db: Session, user: User, data: Dict[str, Any]) -> Person:
    if user_crud.get_user(db, user.id) is None:
        raise NotFoundError("User not found")
    if crud.get_person_by_user_id(db, user.id) is not None:
        logger.warning(f"User {user.id} already has a person profile")
        raise ConflictError(PROFILE_EXISTS)

    data = _flatten(data)
    data["user_id"] = user.id
    with integrity_as_conflict(db, PROFILE_EXISTS):
        person = crud.persons.create(db, data)
    logger.info(f"Person profile created for user {user.id}")
    return person


def update_person(db: Session, user: User, data: Dict[str, Any]) -> Person:
    person = get_my_profile(db, user)
    person = crud.persons.update(db, person, _flatten(data))
    logger.info(f"Person profile updated for user {user.id}")
    return person


def set_visibility(db: Session, user: User, is_public: bool) -> Person:
    person = get_my_profile(db, user)
    return crud.persons.update(db, person, {"is_public": is_public})


def _edit_list(db: Session, user: User, field: str, value: str, add: bool) -> Person:
    """Add or remove one entry of a JSON list column. Both directions are idempotent."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field[:-1].capitalize()} is required")
    person = get_my_profile(db, user)
    current = list(getattr(person, field) or [])
    present = _matches(current, value)

    if add and not present:
        current.append(value)
    elif not add and present:
        current = [item for item in current if item.lower() != value.lower()]
    else:
        return person
    # Gán list mới để SQLAlchemy nhận ra thay đổi trên cột JSON
    return crud.persons.update(db, person, {field: current})


def add_interest(db: Session, user: User, interest: str) -> Person:
    return _edit_list(db, user, "interests", interest, add=True)


def remove_interest(db: Session, user: User, interest: str) -> Person:
    return _edit_list(db, user, "interests", interest, add=False)


def add_language(db: Session, user: User, language: str) -> Person:
    return _edit_list(db, user, "languages", language, add=True)


def remove_language(db: Session, user: User, language: str) -> Person:
    return _edit_list(db, user, "languages", language, add=False)
