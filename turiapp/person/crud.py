from typing import Optional, List, Dict, Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..core.repository import Repository
from ..review.models import Review
from ..user.models import User
from .models import Person

persons = Repository(Person)


def get_person_by_user_id(db: Session, user_id: int) -> Optional[Person]:
    return db.query(Person).filter(Person.user_id == user_id).first()


def _public_profiles(db: Session):
    return (
        db.query(Person)
        .join(User, User.id == Person.user_id)
        .filter(Person.is_public.is_(True), User.is_active.is_(True))
    )


def get_public_profiles(db: Session, limit: int = 20, offset: int = 0) -> List[Person]:
    return _public_profiles(db).order_by(Person.created_at.desc(), Person.id.desc()).offset(offset).limit(limit).all()


def get_all_public_profiles(db: Session) -> List[Person]:
    return _public_profiles(db).order_by(Person.id).all()


def get_profiles_by_location(db: Session, country: str, city: Optional[str] = None,
                             limit: int = 20, offset: int = 0) -> List[Person]:
    query = _public_profiles(db).filter(func.lower(Person.location_country) == country.lower())
    if city:
        query = query.filter(func.lower(Person.location_city) == city.lower())
    return query.order_by(Person.id).offset(offset).limit(limit).all()


def get_profiles_by_nationality(db: Session, nationality: str, limit: int = 20, offset: int = 0) -> List[Person]:
    return (
        _public_profiles(db)
        .filter(func.lower(Person.nationality) == nationality.lower())
        .order_by(Person.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def search_profiles(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Person]:
    pattern = f"%{term}%"
    return (
        _public_profiles(db)
        .filter(
            or_(
                Person.bio.ilike(pattern),
                Person.nationality.ilike(pattern),
                Person.location_city.ilike(pattern),
                Person.location_country.ilike(pattern),
                User.username.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )
        .order_by(Person.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_popular_profiles(db: Session, limit: int = 10) -> List[tuple]:
    """Public profiles ranked by how many public reviews their user wrote."""
    review_count = func.count(Review.id).label("review_count")
    return (
        db.query(Person, review_count)
        .join(User, User.id == Person.user_id)
        .outerjoin(Review, (Review.user_id == Person.user_id) & Review.is_public.is_(True))
        .filter(Person.is_public.is_(True), User.is_active.is_(True))
        .group_by(Person.id)
        .order_by(review_count.desc(), Person.id.asc())
        .limit(limit)
        .all()
    )


def get_person_stats(db: Session) -> Dict[str, Any]:
    total = persons.count(db)
    public = persons.count(db, {"is_public": True})
    countries = (
        db.query(func.count(func.distinct(Person.location_country)))
        .filter(Person.location_country.isnot(None))
        .scalar()
    )
    nationalities = (
        db.query(func.count(func.distinct(Person.nationality)))
        .filter(Person.nationality.isnot(None))
        .scalar()
    )
    return {
        "total_profiles": total,
        "public_profiles": public,
        "private_profiles": total - public,
        "countries": countries or 0,
        "nationalities": nationalities or 0,
    }


def get_location_stats(db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(Person.location_country, Person.location_city, func.count(Person.id))
        .filter(Person.is_public.is_(True), Person.location_country.isnot(None))
        .group_by(Person.location_country, Person.location_city)
        .order_by(func.count(Person.id).desc(), Person.location_country)
        .all()
    )
    return [{"country": row[0], "city": row[1], "count": row[2]} for row in rows]


def get_nationality_stats(db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(Person.nationality, func.count(Person.id))
        .filter(Person.is_public.is_(True), Person.nationality.isnot(None))
        .group_by(Person.nationality)
        .order_by(func.count(Person.id).desc(), Person.nationality)
        .all()
    )
    return [{"nationality": row[0], "count": row[1]} for row in rows]
