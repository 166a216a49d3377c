from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BlacklistIn(BaseModel):
    university_id: int = Field(ge=1)
    first_name: str
    last_name: str
    description: str


class BlacklistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    blacklist_id: int
    university_id: int
    first_name: str
    last_name: str
    description: str
    banned_at: datetime
