from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .exceptions import ConflictError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")


class Repository(Generic[ModelType]):
    """
    Shared data access plumbing for one mapped table.

    Domain crud modules hold an instance (``places = Repository(Place)``)
    and add their own finders next to it. The session is passed per call,
    so one instance serves every request.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _filtered(self, db: Session, filters: Optional[Dict[str, Any]] = None):
        query = db.query(self.model)
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.filter(getattr(self.model, field) == value)
        return query

    def get(self, db: Session, record_id: int) -> Optional[ModelType]:
        return db.get(self.model, record_id)

    def list(
        self,
        db: Session,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ModelType]:
        query = self._filtered(db, filters)
        if order_by:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, db: Session, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._filtered(db, filters).count()

    def exists(self, db: Session, filters: Dict[str, Any]) -> bool:
        return self._filtered(db, filters).first() is not None

    def create(self, db: Session, data: Dict[str, Any], commit: bool = True) -> ModelType:
        record = self.model(**data)
        db.add(record)
        if commit:
            db.commit()
            db.refresh(record)
        else:
            db.flush()
        return record

    def update(self, db: Session, record: ModelType, data: Dict[str, Any], commit: bool = True) -> ModelType:
        for field, value in data.items():
            setattr(record, field, value)
        if commit:
            db.commit()
            db.refresh(record)
        else:
            db.flush()
        return record

    def delete(self, db: Session, record: ModelType, commit: bool = True) -> None:
        db.delete(record)
        if commit:
            db.commit()
        else:
            db.flush()


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for duplicate-key errors (MySQL "Duplicate entry", SQLite "UNIQUE constraint failed")."""
    reason = str(exc.orig).lower()
    return "duplicate" in reason or "unique" in reason


@contextmanager
def integrity_as_conflict(db: Session, error: str):
    """
    Turn a unique-constraint violation raised inside the block into a
    ConflictError carrying ``error``. The session is rolled back first.
    Other integrity errors (foreign key, not null) are re-raised as is.
    """
    try:
        yield
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        logger.warning(f"Integrity violation mapped to conflict: {error}")
        raise ConflictError(error)
