"""
Pydantic schemas for booking writes and reads.

Email format is not checked here: the write path normalizes and validates it
so that direct service callers get the same rules as request handlers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    event_id: int
    email: str = Field(..., max_length=255)


class BookingUpdate(BaseModel):
    event_id: Optional[int] = None
    email: Optional[str] = Field(None, max_length=255)


class BookingResponse(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
