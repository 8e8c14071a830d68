from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from ..user.schemas import UserSummary
from ..place.schemas import PlaceSummary


def _check_image_urls(images):
    for url in images or []:
        if not url.startswith(("http://", "https://")):
            raise ValueError("images must be a list of http(s) URLs")
    return images


class ReviewCreate(BaseModel):
    place_id: int = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    content: str = Field(..., min_length=10, max_length=2000)
    images: Optional[List[str]] = None

    @field_validator("images")
    @classmethod
    def check_images(cls, images):
        return _check_image_urls(images)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    content: Optional[str] = Field(None, min_length=10, max_length=2000)
    images: Optional[List[str]] = None

    @field_validator("rating", "content", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("images")
    @classmethod
    def check_images(cls, images):
        return _check_image_urls(images)


class ReviewResponse(BaseModel):
    id: int
    place_id: int
    user_id: int
    rating: int
    title: Optional[str] = None
    content: str
    images: Optional[List[str]] = None
    helpful_count: int = 0
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    place: Optional[PlaceSummary] = None

    class Config:
        from_attributes = True
