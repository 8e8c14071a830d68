from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from ..user.schemas import UserSummary


class CommentCreate(BaseModel):
    review_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=1, max_length=1000)
    parent_id: Optional[int] = Field(None, gt=0)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class ModerationRequest(BaseModel):
    action: str = Field(..., description="hide, show or delete")


class CommentResponse(BaseModel):
    id: int
    review_id: int
    user_id: int
    parent_id: Optional[int] = None
    content: str
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True
