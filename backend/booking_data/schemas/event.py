"""
Pydantic schemas for event records.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    date: Optional[datetime] = None


class EventResponse(BaseModel):
    id: int
    title: str
    date: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}
