"""
Pydantic models for event data.

These schemas define the structure of event data exchanged via the
API.  ``EventBase`` holds the fields a creator supplies and carries the
validation rules; ``EventCreate`` and ``EventUpdate`` are the request
bodies, ``EventRead`` is the stored row and ``EventDetail`` adds the
occupancy figures computed at read time.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255, examples=["Yoga Class"])
    description: Optional[str] = Field(None, max_length=1000, examples=["A relaxing yoga session"])
    date_time: datetime = Field(..., examples=["2025-09-01T10:00:00Z"])
    location: str = Field(..., min_length=1, max_length=255, examples=["Community Hall"])
    max_capacity: int = Field(..., ge=1, examples=[15])


class EventCreate(EventBase):
    """Schema for creating an event."""
    pass


class EventUpdate(EventBase):
    """Schema for updating an event.

    Updates replace every mutable field, so the same fields as for
    creation are required.
    """
    pass


class EventRead(EventBase):
    """Schema for an event row as stored."""

    id: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EventDetail(EventRead):
    """Event annotated with its creator and current occupancy."""

    creator_name: Optional[str] = None
    current_registrations: int = 0
    available_spots: int = 0


class EventEnvelope(BaseModel):
    event: EventDetail


class EventResponse(BaseModel):
    message: str
    event: EventRead


class EventList(BaseModel):
    events: List[EventDetail]
    total: int


class MessageResponse(BaseModel):
    message: str
