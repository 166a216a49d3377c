from __future__ import annotations
import logging

from sqlalchemy import func, select

from blueprints.core.errors import BadRequest, Conflict, Forbidden, NotFound
from blueprints.security_codes.services import find_active_code
from extensions import db
from models import (
    AvailableStudentRole, Group, GroupDeliverableSelection, GroupMember, Project,
    SecurityCode, Student, StudentDeliverable, StudentDeliverableSelection, StudentRole, utcnow,
)

log = logging.getLogger(__name__)

LEADER = int(AvailableStudentRole.GROUP_LEADER)
MEMBER = int(AvailableStudentRole.MEMBER)


# ---------- поиск и права ----------
def get_group(group_id: int) -> Group:
    group = db.session.get(Group, group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


def membership(group_id: int, student_id: int) -> GroupMember | None:
    return db.session.query(GroupMember).filter_by(group_id=group_id, student_id=student_id).first()


def require_member(group: Group, student: Student) -> GroupMember:
    member = membership(group.group_id, student.student_id)
    if member is None:
        raise Forbidden("You are not a member of this group")
    return member


def require_leader(group: Group, student: Student) -> GroupMember:
    member = membership(group.group_id, student.student_id)
    if member is None or member.student_role_id != LEADER:
        raise Forbidden("Insufficient permissions")
    return member


def student_group_in_project(student_id: int, project_id: int) -> Group | None:
    return (db.session.query(Group)
            .join(GroupMember, GroupMember.group_id == Group.group_id)
            .filter(Group.project_id == project_id, GroupMember.student_id == student_id)
            .first())


def name_exists(project_id: int, name: str) -> bool:
    q = db.session.query(Group).filter(
        Group.project_id == project_id, func.lower(Group.name) == name.strip().lower()
    )
    return db.session.query(q.exists()).scalar()


def _clean_name(name: str) -> str:
    if not name or not name.strip():
        raise BadRequest("Group name cannot be empty")
    return name.strip()


# ---------- студент ----------
def validate_leader_code(raw: str) -> dict:
    """Проверка кода перед созданием группы: годится только код роли Group Leader."""
    code = db.session.query(SecurityCode).filter_by(code=(raw or "").strip().upper()).first()
    if code is None:
        return {"is_valid": False, "message": "Invalid security code"}
    if code.is_expired(utcnow()):
        return {"is_valid": False, "message": "Security code has expired"}
    is_leader_code = code.user_role_id == LEADER
    return {
        "is_valid": is_leader_code,
        "role": code.role.name,
        "project": code.project,
        "message": "Valid GroupLeader security code" if is_leader_code
        else "Security code is valid but not for GroupLeader role",
    }


def create_group(student: Student, *, name: str, security_code: str) -> Group:
    name = _clean_name(name)
    code = find_active_code(security_code)
    if code is None or code.user_role_id != LEADER:
        raise BadRequest("Invalid security code")
    project = code.project
    if not project.active:
        raise BadRequest("Project is not active")
    if student_group_in_project(student.student_id, project.project_id):
        raise Conflict("Student is already in a group for this project")
    if name_exists(project.project_id, name):
        raise Conflict("Group already exists")
    groups_count = db.session.query(Group).filter_by(project_id=project.project_id).count()
    if groups_count >= project.max_groups:
        raise BadRequest("Project has reached the maximum number of groups")

    group = Group(project_id=project.project_id, name=name)
    group.members.append(GroupMember(student_id=student.student_id, student_role_id=LEADER))
    db.session.add(group)
    db.session.commit()
    log.info("group %s created in project %s by student %s", group.group_id, project.project_id, student.student_id)
    return group


def student_groups(student: Student) -> list[tuple[Group, Project, GroupMember]]:
    return (db.session.query(Group, Project, GroupMember)
            .join(Project, Project.project_id == Group.project_id)
            .join(GroupMember, GroupMember.group_id == Group.group_id)
            .filter(GroupMember.student_id == student.student_id)
            .order_by(Group.group_id)
            .all())


def rename_group(student: Student, group_id: int, name: str) -> Group:
    group = get_group(group_id)
    require_leader(group, student)
    name = _clean_name(name)
    if name.lower() != group.name.lower() and name_exists(group.project_id, name):
        raise Conflict("Group already exists")
    group.name = name
    db.session.commit()
    return group


def delete_group(student: Student, group_id: int) -> None:
    group = get_group(group_id)
    require_leader(group, student)
    db.session.delete(group)
    db.session.commit()
    log.info("group %s deleted by student %s", group_id, student.student_id)


# ---------- состав группы ----------
def _drop_student_selections(student_id: int, project_id: int) -> None:
    # выборы студента в проекте теряют смысл вне группы
    deliverable_ids = select(StudentDeliverable.student_deliverable_id).where(
        StudentDeliverable.project_id == project_id
    )
    (db.session.query(StudentDeliverableSelection)
     .filter(StudentDeliverableSelection.student_id == student_id,
             StudentDeliverableSelection.student_deliverable_id.in_(deliverable_ids))
     .delete(synchronize_session=False))


def _student_by_email(email: str) -> Student:
    student = (db.session.query(Student)
               .filter(func.lower(Student.email) == (email or "").strip().lower())
               .first())
    if student is None:
        raise NotFound("Student not found")
    return student


def add_member(group: Group, email: str, role_id: int = MEMBER) -> GroupMember:
    if db.session.get(StudentRole, role_id) is None:
        raise BadRequest("Invalid student role")
    student = _student_by_email(email)
    if student.is_pending:
        raise BadRequest("Student must confirm their email before joining a group")
    if student_group_in_project(student.student_id, group.project_id):
        raise Conflict("Student is already in a group for this project")
    project = group.project
    if len(group.members) >= project.max_group_size:
        raise BadRequest(
            f"Group has reached the maximum size of {project.max_group_size} members for this project"
        )
    if role_id == LEADER and any(m.student_role_id == LEADER for m in group.members):
        raise Conflict("Group already has a leader")

    member = GroupMember(student_id=student.student_id, student_role_id=role_id)
    group.members.append(member)
    db.session.commit()
    log.info("student %s joined group %s", student.student_id, group.group_id)
    return member


def remove_member(group: Group, student_id: int, *, allow_leader: bool = False) -> None:
    member = membership(group.group_id, student_id)
    if member is None:
        raise NotFound("Member not found in this group")
    if member.student_role_id == LEADER and not allow_leader:
        raise BadRequest("Cannot remove the group leader")
    _drop_student_selections(student_id, group.project_id)
    group.members.remove(member)
    db.session.commit()
    log.info("student %s removed from group %s", student_id, group.group_id)


def transfer_leadership(group: Group, new_leader_student_id: int, remove_old_leader: bool) -> dict:
    current = next((m for m in group.members if m.student_role_id == LEADER), None)
    if current is None:
        raise BadRequest("Group has no leader")
    new = next((m for m in group.members
                if m.student_id == new_leader_student_id and m.student_role_id != LEADER), None)
    if new is None:
        raise NotFound("New leader not found in group")

    old_info = {"student_id": current.student_id, "name": current.student.full_name}
    if remove_old_leader:
        _drop_student_selections(current.student_id, group.project_id)
        group.members.remove(current)
        old_info["status"] = "removed_from_group"
    else:
        current.student_role_id = MEMBER
        old_info["status"] = "demoted_to_member"
    # сначала сбрасываем старого лидера, затем назначаем нового
    db.session.flush()
    new.student_role_id = LEADER
    db.session.commit()
    return {
        "message": "Group leader updated successfully",
        "old_leader": old_info,
        "new_leader": {"student_id": new.student_id, "name": new.student.full_name, "status": "promoted_to_leader"},
    }


def member_rows(group: Group) -> list[dict]:
    return [{
        "student_id": m.student_id,
        "first_name": m.student.first_name,
        "last_name": m.student.last_name,
        "email": m.student.email,
        "role_id": m.student_role_id,
        "role": m.role.name,
    } for m in group.members]


# ---------- админ: обзор ----------
def _selection_of(group: Group) -> GroupDeliverableSelection | None:
    return db.session.query(GroupDeliverableSelection).filter_by(group_id=group.group_id).first()


def project_groups_overview(project: Project) -> list[dict]:
    now = utcnow()
    out = []
    groups = db.session.query(Group).filter_by(project_id=project.project_id).order_by(Group.group_id).all()
    for group in groups:
        leader = next((m for m in group.members if m.student_role_id == LEADER), None)
        selection = _selection_of(group)
        out.append({
            "group_id": group.group_id,
            "name": group.name,
            "member_count": len(group.members),
            "group_leader": None if leader is None else {
                "student_id": leader.student_id,
                "name": leader.student.full_name,
                "email": leader.student.email,
            },
            "deliverable_selected": None if selection is None else {
                "group_deliverable_id": selection.group_deliverable_id,
                "name": selection.deliverable.name,
            },
            "time_expired": selection is None and project.selection_deadline_passed(now),
        })
    return out


def _student_selection_in_project(student_id: int, project_id: int) -> StudentDeliverableSelection | None:
    return (db.session.query(StudentDeliverableSelection)
            .join(StudentDeliverable,
                  StudentDeliverable.student_deliverable_id == StudentDeliverableSelection.student_deliverable_id)
            .filter(StudentDeliverableSelection.student_id == student_id,
                    StudentDeliverable.project_id == project_id)
            .first())


def group_details(group: Group) -> dict:
    members = []
    for m in group.members:
        sel = _student_selection_in_project(m.student_id, group.project_id)
        members.append({
            "student_id": m.student_id,
            "first_name": m.student.first_name,
            "last_name": m.student.last_name,
            "email": m.student.email,
            "university_id": m.student.university_id,
            "role": m.role.name,
            "student_deliverable_selection": None if sel is None else {
                "student_deliverable_id": sel.student_deliverable_id,
                "student_deliverable_name": sel.deliverable.name,
            },
        })

    selection = _selection_of(group)
    selection_out = None
    if selection is not None:
        selection_out = {
            "group_deliverable_id": selection.group_deliverable_id,
            "name": selection.deliverable.name,
            "component_implementation_details": [{
                "id": d.id,
                "group_deliverable_component_id": d.group_deliverable_component_id,
                "component_name": d.component.name,
                "markdown_description": d.markdown_description,
                "repository_link": d.repository_link,
                "created_at": d.created_at,
                "updated_at": d.updated_at,
            } for d in selection.implementation_details],
        }

    return {
        "group_id": group.group_id,
        "name": group.name,
        "project_id": group.project_id,
        "project_name": group.project.name,
        "members": members,
        "deliverable_selection": selection_out,
    }
