import pytest
from sqlalchemy.exc import IntegrityError

from ..core.database import SessionLocal
from ..core.exceptions import ConflictError
from ..core.repository import integrity_as_conflict
from ..favorite import crud as favorite_crud
from ..review import services as review_services
from ..user.models import User
from .conftest import create_place


def test_unique_violation_becomes_conflict(client, user_a):
    user, token = user_a
    place = create_place(client, token)
    with SessionLocal() as db:
        favorite_crud.create_favorite(db, user["id"], place["id"])
        with pytest.raises(ConflictError) as exc_info:
            with integrity_as_conflict(db, "Place is already in favorites"):
                favorite_crud.create_favorite(db, user["id"], place["id"])
        assert exc_info.value.error == "Place is already in favorites"


def test_foreign_key_violation_is_reraised(client, user_a):
    user, _ = user_a
    with SessionLocal() as db:
        with pytest.raises(IntegrityError):
            with integrity_as_conflict(db, "Place is already in favorites"):
                favorite_crud.create_favorite(db, user["id"], 424242)
        # Session đã rollback, vẫn dùng tiếp được
        assert db.get(User, user["id"]).username == "alice"


def test_review_by_missing_user_is_not_reported_as_duplicate(client, admin):
    _, admin_token = admin
    place = create_place(client, admin_token)
    with SessionLocal() as db:
        with pytest.raises(IntegrityError):
            review_services.create_review(db, place["id"], 999999, 5, None, "Lovely views from the top")
