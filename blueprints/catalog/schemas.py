from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CatalogItemIn(BaseModel):
    project_id: int
    name: str


class CatalogItemUpdateIn(BaseModel):
    name: str


class QuantityUpdateIn(BaseModel):
    quantity: int


# ---------- группы ----------
class GroupDeliverableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_deliverable_id: int
    project_id: int
    name: str


class GroupComponentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_deliverable_component_id: int
    project_id: int
    name: str


class GroupMappingIn(BaseModel):
    group_deliverable_id: int
    group_deliverable_component_id: int
    quantity: int


class GroupMappingOut(BaseModel):
    id: int
    group_deliverable_id: int
    group_deliverable_component_id: int
    quantity: int
    component_name: Optional[str] = None
    deliverable_name: Optional[str] = None


# ---------- студенты ----------
class StudentDeliverableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_deliverable_id: int
    project_id: int
    name: str


class StudentComponentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_deliverable_component_id: int
    project_id: int
    name: str


class StudentMappingIn(BaseModel):
    student_deliverable_id: int
    student_deliverable_component_id: int
    quantity: int


class StudentMappingOut(BaseModel):
    id: int
    student_deliverable_id: int
    student_deliverable_component_id: int
    quantity: int
    component_name: Optional[str] = None
    deliverable_name: Optional[str] = None
