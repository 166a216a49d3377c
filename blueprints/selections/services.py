from __future__ import annotations
import logging

from blueprints.core.errors import BadRequest, Conflict, Forbidden, NotFound
from blueprints.groups.services import LEADER, get_group, membership, student_group_in_project
from blueprints.projects.services import get_project
from extensions import db
from models import (
    Group, GroupComponentImplementationDetail, GroupDeliverable, GroupDeliverableSelection,
    GroupDeliverablesComponent, Project, Student, StudentDeliverable, StudentDeliverableSelection, utcnow,
)

log = logging.getLogger(__name__)


def _check_deadline(project: Project) -> None:
    if project.selection_deadline_passed(utcnow()):
        raise BadRequest("Deliverable selection deadline has passed")


def _require_group_leader(group: Group, student: Student, action: str) -> None:
    member = membership(group.group_id, student.student_id)
    if member is None or member.student_role_id != LEADER:
        raise Forbidden(f"Only group leaders can {action}")


def _require_group_member(group: Group, student: Student) -> None:
    if membership(group.group_id, student.student_id) is None:
        raise Forbidden("You are not a member of this group")


# ---------- выбор поставки группой ----------
def group_selection(group_id: int) -> GroupDeliverableSelection | None:
    return db.session.query(GroupDeliverableSelection).filter_by(group_id=group_id).first()


def create_group_selection(student: Student, group_id: int, deliverable_id: int) -> GroupDeliverableSelection:
    group = get_group(group_id)
    _require_group_leader(group, student, "select deliverables")
    if group_selection(group_id) is not None:
        raise Conflict("Group has already selected a deliverable (immutable)")
    deliverable = db.session.get(GroupDeliverable, deliverable_id)
    if deliverable is None:
        raise NotFound("Deliverable not found")
    if deliverable.project_id != group.project_id:
        raise BadRequest("Deliverable does not belong to the same project as the group")
    _check_deadline(group.project)

    selection = GroupDeliverableSelection(group_id=group_id, group_deliverable_id=deliverable_id)
    db.session.add(selection)
    db.session.commit()
    log.info("group %s selected deliverable %s", group_id, deliverable_id)
    return selection


def read_group_selection(student: Student, group_id: int) -> dict:
    group = get_group(group_id)
    _require_group_member(group, student)
    selection = group_selection(group_id)
    if selection is None:
        raise NotFound("No deliverable selected yet")
    components = (db.session.query(GroupDeliverablesComponent)
                  .filter_by(group_deliverable_id=selection.group_deliverable_id)
                  .order_by(GroupDeliverablesComponent.id)
                  .all())
    return {
        "group_deliverable_selection_id": selection.group_deliverable_selection_id,
        "group_id": group_id,
        "group_deliverable_id": selection.group_deliverable_id,
        "group_deliverable_name": selection.deliverable.name,
        "components": [{
            "group_deliverable_component_id": m.group_deliverable_component_id,
            "component_name": m.component.name,
            "quantity": m.quantity,
        } for m in components],
        "created_at": selection.created_at,
        "updated_at": selection.updated_at,
    }


# ---------- детали реализации компонентов ----------
def detail_row(d: GroupComponentImplementationDetail) -> dict:
    return {
        "id": d.id,
        "group_deliverable_component_id": d.group_deliverable_component_id,
        "component_name": d.component.name,
        "markdown_description": d.markdown_description,
        "repository_link": d.repository_link,
        "created_at": d.created_at,
        "updated_at": d.updated_at,
    }


def _require_selection(group_id: int) -> GroupDeliverableSelection:
    selection = group_selection(group_id)
    if selection is None:
        raise NotFound("Group must select a deliverable first")
    return selection


def _clean_detail_fields(markdown_description: str, repository_link: str) -> tuple[str, str]:
    if not markdown_description or not markdown_description.strip():
        raise BadRequest("Markdown description field is mandatory")
    if not repository_link or not repository_link.strip():
        raise BadRequest("Repository link field is mandatory")
    return markdown_description.strip(), repository_link.strip()


def _find_detail(selection: GroupDeliverableSelection, component_id: int) -> GroupComponentImplementationDetail:
    detail = next((d for d in selection.implementation_details
                   if d.group_deliverable_component_id == component_id), None)
    if detail is None:
        raise NotFound("Implementation details not found for this component")
    return detail


def create_detail(student: Student, group_id: int, *, group_deliverable_component_id: int,
                  markdown_description: str, repository_link: str) -> GroupComponentImplementationDetail:
    markdown_description, repository_link = _clean_detail_fields(markdown_description, repository_link)
    group = get_group(group_id)
    _require_group_leader(group, student, "create component implementation details")
    selection = _require_selection(group_id)

    in_deliverable = db.session.query(GroupDeliverablesComponent).filter_by(
        group_deliverable_id=selection.group_deliverable_id,
        group_deliverable_component_id=group_deliverable_component_id,
    ).first()
    if in_deliverable is None:
        raise NotFound("Component is not part of the selected deliverable")
    if any(d.group_deliverable_component_id == group_deliverable_component_id
           for d in selection.implementation_details):
        raise Conflict("Implementation details already exist for this component")

    detail = GroupComponentImplementationDetail(
        group_deliverable_component_id=group_deliverable_component_id,
        markdown_description=markdown_description,
        repository_link=repository_link,
    )
    selection.implementation_details.append(detail)
    db.session.commit()
    return detail


def list_details(student: Student, group_id: int) -> list[GroupComponentImplementationDetail]:
    group = get_group(group_id)
    _require_group_member(group, student)
    return list(_require_selection(group_id).implementation_details)


def update_detail(student: Student, group_id: int, *, group_deliverable_component_id: int,
                  markdown_description: str, repository_link: str) -> GroupComponentImplementationDetail:
    markdown_description, repository_link = _clean_detail_fields(markdown_description, repository_link)
    group = get_group(group_id)
    _require_group_leader(group, student, "update component implementation details")
    detail = _find_detail(_require_selection(group_id), group_deliverable_component_id)
    detail.markdown_description = markdown_description
    detail.repository_link = repository_link
    db.session.commit()
    return detail


def delete_detail(student: Student, group_id: int, group_deliverable_component_id: int) -> None:
    group = get_group(group_id)
    _require_group_leader(group, student, "delete component implementation details")
    selection = _require_selection(group_id)
    selection.implementation_details.remove(_find_detail(selection, group_deliverable_component_id))
    db.session.commit()


# ---------- индивидуальный выбор студента ----------
def student_selection(student_id: int, project_id: int) -> StudentDeliverableSelection | None:
    return (db.session.query(StudentDeliverableSelection)
            .join(StudentDeliverable,
                  StudentDeliverable.student_deliverable_id == StudentDeliverableSelection.student_deliverable_id)
            .filter(StudentDeliverableSelection.student_id == student_id,
                    StudentDeliverable.project_id == project_id)
            .first())


def _project_deliverable(deliverable_id: int, project_id: int) -> StudentDeliverable:
    deliverable = db.session.get(StudentDeliverable, deliverable_id)
    if deliverable is None:
        raise NotFound("Deliverable not found")
    if deliverable.project_id != project_id:
        raise BadRequest("Deliverable does not belong to the specified project")
    return deliverable


def create_student_selection(student: Student, *, student_deliverable_id: int,
                             project_id: int) -> StudentDeliverableSelection:
    if student_group_in_project(student.student_id, project_id) is None:
        raise Forbidden("You must be a member of a group in this project to select a deliverable")
    if student_selection(student.student_id, project_id) is not None:
        raise Conflict("You have already selected a deliverable for this project. Use PATCH to update it.")
    _project_deliverable(student_deliverable_id, project_id)
    _check_deadline(get_project(project_id))

    selection = StudentDeliverableSelection(student_id=student.student_id,
                                            student_deliverable_id=student_deliverable_id)
    db.session.add(selection)
    db.session.commit()
    log.info("student %s selected deliverable %s", student.student_id, student_deliverable_id)
    return selection


def update_student_selection(student: Student, *, student_deliverable_id: int,
                             project_id: int) -> StudentDeliverableSelection:
    if student_group_in_project(student.student_id, project_id) is None:
        raise Forbidden("You must be a member of a group in this project to update a deliverable selection")
    selection = student_selection(student.student_id, project_id)
    if selection is None:
        raise NotFound("No deliverable selection found to update")
    _project_deliverable(student_deliverable_id, project_id)
    _check_deadline(get_project(project_id))
    selection.student_deliverable_id = student_deliverable_id
    db.session.commit()
    return selection


def student_selection_row(selection: StudentDeliverableSelection) -> dict:
    return {
        "student_deliverable_selection_id": selection.student_deliverable_selection_id,
        "student_id": selection.student_id,
        "student_deliverable_id": selection.student_deliverable_id,
        "student_deliverable_name": selection.deliverable.name,
        "project_id": selection.deliverable.project_id,
    }


def read_student_selection(student: Student, project_id: int) -> StudentDeliverableSelection:
    selection = student_selection(student.student_id, project_id)
    if selection is None:
        raise NotFound("No deliverable selected for this project")
    return selection


def delete_student_selection(student: Student, project_id: int) -> None:
    selection = student_selection(student.student_id, project_id)
    if selection is None:
        raise NotFound("No deliverable selection found to delete")
    db.session.delete(selection)
    db.session.commit()


# ---------- обзор для админов ----------
def project_group_selections(project: Project) -> list[dict]:
    rows = (db.session.query(GroupDeliverableSelection, Group)
            .join(Group, Group.group_id == GroupDeliverableSelection.group_id)
            .filter(Group.project_id == project.project_id)
            .order_by(Group.group_id)
            .all())
    return [{
        "group_deliverable_selection_id": s.group_deliverable_selection_id,
        "group_id": g.group_id,
        "group_name": g.name,
        "group_deliverable_id": s.group_deliverable_id,
        "group_deliverable_name": s.deliverable.name,
        "component_implementation_details": [detail_row(d) for d in s.implementation_details],
    } for s, g in rows]


def project_student_selections(project: Project) -> list[dict]:
    rows = (db.session.query(StudentDeliverableSelection)
            .join(StudentDeliverable,
                  StudentDeliverable.student_deliverable_id == StudentDeliverableSelection.student_deliverable_id)
            .filter(StudentDeliverable.project_id == project.project_id)
            .order_by(StudentDeliverableSelection.student_id)
            .all())
    return [{
        "student_deliverable_selection_id": s.student_deliverable_selection_id,
        "student_id": s.student_id,
        "student_name": s.student.full_name,
        "student_email": s.student.email,
        "student_deliverable_id": s.student_deliverable_id,
        "student_deliverable_name": s.deliverable.name,
    } for s in rows]
