from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Float, JSON, ForeignKey, func
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..category.models import place_categories

PRICE_RANGES = ("free", "low", "medium", "high", "luxury")


class Place(Base):
    __tablename__ = "places"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    short_description = Column(String(500))
    address = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    phone = Column(String(20))
    email = Column(String(100))
    website = Column(String(255))
    price_range = Column(String(10), nullable=False, default="free")
    opening_hours = Column(JSON)
    amenities = Column(JSON)
    images = Column(JSON)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    average_rating = Column(Float, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
    total_visits = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    categories = relationship("Category", secondary=place_categories, lazy="selectin", order_by="Category.sort_order")
