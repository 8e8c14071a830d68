from pydantic import BaseModel, Field, constr, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from ..place.schemas import Coordinates
from ..user.schemas import UserSummary


class PersonBase(BaseModel):
    bio: Optional[str] = Field(None, max_length=1000)
    birth_date: Optional[date] = None
    nationality: Optional[str] = Field(None, max_length=100)
    languages: Optional[List[constr(max_length=50)]] = None
    interests: Optional[List[constr(max_length=100)]] = None
    social_links: Optional[Dict[str, Any]] = None
    location_country: Optional[str] = Field(None, max_length=100)
    location_city: Optional[str] = Field(None, max_length=100)
    coordinates: Optional[Coordinates] = None

    @field_validator("birth_date")
    @classmethod
    def birth_date_in_past(cls, value):
        if value is not None and value > date.today():
            raise ValueError("birth_date cannot be in the future")
        return value


class PersonCreate(PersonBase):
    is_public: bool = True


class PersonUpdate(PersonBase):
    is_public: Optional[bool] = None

    @field_validator("is_public", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class VisibilityUpdate(BaseModel):
    is_public: bool


class ListItem(BaseModel):
    value: str = Field(..., min_length=1, max_length=100)


class PersonResponse(BaseModel):
    id: int
    user_id: int
    bio: Optional[str] = None
    birth_date: Optional[date] = None
    nationality: Optional[str] = None
    languages: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    social_links: Optional[Dict[str, Any]] = None
    location_country: Optional[str] = None
    location_city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True
