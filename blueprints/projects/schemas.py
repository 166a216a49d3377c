from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProjectIn(BaseModel):
    name: str = ""
    max_student_uploads: int
    max_group_size: int
    max_groups: int = 10
    deliverable_selection_deadline: Optional[datetime] = None
    active: bool = True
    year: Optional[int] = None


class ProjectUpdateIn(BaseModel):
    name: Optional[str] = None
    year: Optional[int] = None
    max_student_uploads: Optional[int] = None
    max_group_size: Optional[int] = None
    max_groups: Optional[int] = None
    deliverable_selection_deadline: Optional[datetime] = None
    active: Optional[bool] = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int
    name: str
    year: int
    max_student_uploads: int
    max_group_size: int
    max_groups: int
    deliverable_selection_deadline: Optional[datetime] = None
    active: bool


class AssignCoordinatorIn(BaseModel):
    admin_id: int


class CoordinatorOut(BaseModel):
    admin_id: int
    first_name: str
    last_name: str
    email: str
    assigned_at: datetime


class StudentProjectOut(ProjectOut):
    group_id: int
    group_name: str
    role: str
