"""
Pydantic models for event registrations.

A registration links one user to one event.  ``UserRegistration``
joins in the event details shown on a user's "my registrations" list.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class RegistrationRead(BaseModel):
    id: int
    user_id: int
    event_id: int
    registration_date: Optional[datetime] = None
    status: str = "confirmed"

    model_config = ConfigDict(from_attributes=True)


class UserRegistration(RegistrationRead):
    title: str
    description: Optional[str] = None
    date_time: datetime
    location: Optional[str] = None
    max_capacity: int
    creator_name: Optional[str] = None


class RegistrationResponse(BaseModel):
    message: str
    registration: RegistrationRead


class RegistrationList(BaseModel):
    registrations: List[UserRegistration]
    total: int
