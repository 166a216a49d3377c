from __future__ import annotations
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict


# ---------- выбор группы ----------
class GroupSelectionIn(BaseModel):
    group_deliverable_id: int


class SelectionComponentOut(BaseModel):
    group_deliverable_component_id: int
    component_name: str
    quantity: int


class GroupSelectionOut(BaseModel):
    group_deliverable_selection_id: int
    group_id: int
    group_deliverable_id: int
    group_deliverable_name: str
    components: List[SelectionComponentOut] = []
    created_at: datetime
    updated_at: datetime


# ---------- детали реализации ----------
class ImplementationDetailIn(BaseModel):
    group_deliverable_component_id: int
    markdown_description: str
    repository_link: str


class ImplementationDetailKeyIn(BaseModel):
    group_deliverable_component_id: int


class ImplementationDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    group_deliverable_component_id: int
    component_name: str
    markdown_description: str
    repository_link: str
    created_at: datetime
    updated_at: datetime


# ---------- выбор студента ----------
class StudentSelectionIn(BaseModel):
    student_deliverable_id: int
    project_id: int


class StudentSelectionOut(BaseModel):
    student_deliverable_selection_id: int
    student_id: int
    student_deliverable_id: int
    student_deliverable_name: str
    project_id: int


# ---------- обзор для админов ----------
class GroupSelectionInfo(BaseModel):
    group_deliverable_selection_id: int
    group_id: int
    group_name: str
    group_deliverable_id: int
    group_deliverable_name: str
    component_implementation_details: List[ImplementationDetailOut] = []


class StudentSelectionInfo(BaseModel):
    student_deliverable_selection_id: int
    student_id: int
    student_name: str
    student_email: str
    student_deliverable_id: int
    student_deliverable_name: str
