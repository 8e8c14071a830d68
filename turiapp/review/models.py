from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey,
    CheckConstraint, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship

from ..core.database import Base


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("place_id", "user_id", name="uq_review_place_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )
    id = Column(Integer, primary_key=True, index=True)
    place_id = Column(Integer, ForeignKey("places.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(200))
    content = Column(Text, nullable=False)
    images = Column(JSON)
    helpful_count = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
    place = relationship("Place", lazy="joined")


class ReviewHelpful(Base):
    """One row per distinct "helpful" vote."""
    __tablename__ = "review_helpful"
    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_helpful_review_user"),
    )
    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
