from pydantic import BaseModel, EmailStr, Field, AliasChoices, model_validator, field_validator
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime

from ..category.schemas import CategoryResponse

PriceRange = Literal["free", "low", "medium", "high", "luxury"]
URL_PATTERN = r"^https?://\S+$"


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng", "lon"))


class PlaceCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=500)
    address: str = Field(..., min_length=5, max_length=500)
    coordinates: Coordinates
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, pattern=URL_PATTERN, max_length=255)
    price_range: PriceRange = "free"
    opening_hours: Optional[Dict[str, Any]] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    category_ids: List[int] = []

    @model_validator(mode="after")
    def check_lists(self):
        for url in self.images or []:
            if not url.startswith(("http://", "https://")):
                raise ValueError("images must be a list of http(s) URLs")
        if any(category_id <= 0 for category_id in self.category_ids):
            raise ValueError("category_ids must be positive integers")
        return self


class PlaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, min_length=5, max_length=500)
    coordinates: Optional[Coordinates] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, pattern=URL_PATTERN, max_length=255)
    price_range: Optional[PriceRange] = None
    opening_hours: Optional[Dict[str, Any]] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    category_ids: Optional[List[int]] = None

    @field_validator("name", "address", "coordinates", "price_range", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @model_validator(mode="after")
    def check_lists(self):
        for url in self.images or []:
            if not url.startswith(("http://", "https://")):
                raise ValueError("images must be a list of http(s) URLs")
        if any(category_id <= 0 for category_id in self.category_ids or []):
            raise ValueError("category_ids must be positive integers")
        return self


class FlagUpdate(BaseModel):
    value: bool = True


class PlaceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    address: str
    latitude: float
    longitude: float
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    price_range: str
    opening_hours: Optional[Dict[str, Any]] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    is_verified: bool
    is_featured: bool
    is_active: bool
    average_rating: float = 0
    total_reviews: int = 0
    total_visits: int = 0
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    categories: List[CategoryResponse] = []

    class Config:
        from_attributes = True


class PlaceSummary(BaseModel):
    """Compact place info embedded in reviews and favorites."""
    id: int
    name: str
    address: str
    price_range: str
    average_rating: float = 0
    images: Optional[List[str]] = None

    class Config:
        from_attributes = True
