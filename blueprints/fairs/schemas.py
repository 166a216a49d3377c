from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FairIn(BaseModel):
    project_id: int
    details: str
    start_date: datetime
    end_date: datetime


class FairUpdateIn(BaseModel):
    details: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class FairOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fair_id: int
    project_id: int
    details: str
    start_date: datetime
    end_date: datetime


class TransactionIn(BaseModel):
    buyer_group_id: int
    group_deliverable_selection_id: int
    fair_id: int


class TransactionOut(BaseModel):
    transaction_id: int
    fair_id: int
    buyer_group_id: int
    buyer_group_name: str
    seller_group_id: int
    seller_group_name: str
    group_deliverable_selection_id: int
    group_deliverable_name: str
    timestamp: datetime
