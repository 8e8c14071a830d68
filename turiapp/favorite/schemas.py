from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from ..place.schemas import PlaceSummary

MAX_BULK_SIZE = 50


class FavoriteCreate(BaseModel):
    place_id: int = Field(..., gt=0)


class BulkFavoriteRequest(BaseModel):
    place_ids: List[int] = Field(default_factory=list, max_length=MAX_BULK_SIZE)


class FavoriteResponse(BaseModel):
    id: int
    user_id: int
    place_id: int
    created_at: Optional[datetime] = None
    place: Optional[PlaceSummary] = None

    class Config:
        from_attributes = True
