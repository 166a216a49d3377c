from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------- запросы ----------
class CreateGroupIn(BaseModel):
    name: str
    security_code: str


class RenameGroupIn(BaseModel):
    name: str


class CheckNameIn(BaseModel):
    project_id: int
    name: str


class ValidateCodeIn(BaseModel):
    security_code: str


class AddMemberIn(BaseModel):
    email: str


class RemoveMemberIn(BaseModel):
    student_id: int


class AdminAddMemberIn(BaseModel):
    student_email: str
    role_id: int = 2


class TransferLeadershipIn(BaseModel):
    new_leader_student_id: int
    remove_old_leader: bool = False


# ---------- ответы ----------
class ProjectBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int
    name: str
    year: int


class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_id: int
    project_id: int
    name: str
    created_at: datetime


class CreateGroupOut(BaseModel):
    group_id: int
    name: str
    project_id: int
    role: str


class GroupWithProjectOut(BaseModel):
    group: GroupOut
    project: ProjectBrief
    role: str


class ValidateCodeOut(BaseModel):
    is_valid: bool
    role: Optional[str] = None
    project: Optional[ProjectBrief] = None
    message: str


class MemberOut(BaseModel):
    student_id: int
    first_name: str
    last_name: str
    email: str
    role_id: int
    role: str


class GroupMembersOut(BaseModel):
    group_id: int
    group_name: str
    members: list[MemberOut]


class LeaderBrief(BaseModel):
    student_id: int
    name: str
    email: str


class DeliverableBrief(BaseModel):
    group_deliverable_id: int
    name: str


class ProjectGroupOut(BaseModel):
    group_id: int
    name: str
    member_count: int
    group_leader: Optional[LeaderBrief] = None
    deliverable_selected: Optional[DeliverableBrief] = None
    time_expired: bool


class StudentSelectionBrief(BaseModel):
    student_deliverable_id: int
    student_deliverable_name: str


class MemberDetailOut(BaseModel):
    student_id: int
    first_name: str
    last_name: str
    email: str
    university_id: int
    role: str
    student_deliverable_selection: Optional[StudentSelectionBrief] = None


class ImplementationDetailBrief(BaseModel):
    id: int
    group_deliverable_component_id: int
    component_name: str
    markdown_description: str
    repository_link: str
    created_at: datetime
    updated_at: datetime


class GroupSelectionBrief(BaseModel):
    group_deliverable_id: int
    name: str
    component_implementation_details: list[ImplementationDetailBrief]


class GroupDetailsOut(BaseModel):
    group_id: int
    name: str
    project_id: int
    project_name: str
    members: list[MemberDetailOut]
    deliverable_selection: Optional[GroupSelectionBrief] = None


class LeaderChangeOut(BaseModel):
    student_id: int
    name: str
    status: str


class TransferLeadershipOut(BaseModel):
    message: str
    old_leader: Optional[LeaderChangeOut] = None
    new_leader: LeaderChangeOut
