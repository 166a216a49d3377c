from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class ComplaintIn(BaseModel):
    from_group_id: int
    to_group_id: int
    text: str


class ComplaintOut(BaseModel):
    complaint_id: int
    from_group_id: int
    from_group_name: str
    to_group_id: int
    to_group_name: str
    text: str
    created_at: datetime
