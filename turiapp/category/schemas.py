from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=255)
    color_code: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    parent_id: Optional[int] = Field(None, gt=0)
    sort_order: int = Field(0, ge=0)


class CategoryCreate(CategoryBase):
    pass


class SubcategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=255)
    color_code: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    sort_order: int = Field(0, ge=0)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon_url: Optional[str] = Field(None, max_length=255)
    color_code: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    parent_id: Optional[int] = Field(None, gt=0)
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name", "sort_order", "is_active", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class SortOrderUpdate(BaseModel):
    sort_order: int = Field(..., ge=0)


class CategoryReorderItem(BaseModel):
    categoryId: Optional[int] = Field(None, gt=0)
    sortOrder: Optional[int] = Field(None, ge=0)


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    color_code: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
