from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, Float, JSON, ForeignKey, func
from sqlalchemy.orm import relationship

from ..core.database import Base


class Person(Base):
    __tablename__ = "persons"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    bio = Column(Text)
    birth_date = Column(Date)
    nationality = Column(String(100))
    languages = Column(JSON)
    interests = Column(JSON)
    social_links = Column(JSON)
    location_country = Column(String(100))
    location_city = Column(String(100))
    latitude = Column(Float)
    longitude = Column(Float)
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
