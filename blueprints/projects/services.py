from __future__ import annotations
import logging

from blueprints.core.errors import BadRequest, Conflict, Forbidden, NotFound
from extensions import db
from models import (
    Admin, AvailableAdminRole, CoordinatorProject, Group, GroupMember, Project,
    as_utc_naive, utcnow,
)
from .schemas import ProjectIn, ProjectUpdateIn

log = logging.getLogger(__name__)

NOT_ASSIGNED = "Access denied - you are not assigned to this project"


# ---------- доступ координаторов ----------
def is_coordinator(admin: Admin) -> bool:
    return admin.admin_role_id == AvailableAdminRole.COORDINATOR


def assigned_project_ids(admin: Admin) -> list[int]:
    rows = db.session.query(CoordinatorProject.project_id).filter_by(admin_id=admin.admin_id).all()
    return [r[0] for r in rows]


def get_project(project_id: int) -> Project:
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


def ensure_project_access(admin: Admin, project_id: int) -> Project:
    """Проект существует и координатор к нему назначен; остальные админы видят всё."""
    project = get_project(project_id)
    if is_coordinator(admin):
        assigned = db.session.query(CoordinatorProject).filter_by(
            admin_id=admin.admin_id, project_id=project_id
        ).first()
        if assigned is None:
            raise Forbidden(NOT_ASSIGNED)
    return project


def visible_projects_query(admin: Admin):
    q = db.session.query(Project).order_by(Project.year.desc(), Project.project_id)
    if is_coordinator(admin):
        q = q.filter(Project.project_id.in_(assigned_project_ids(admin)))
    return q


# ---------- проверки полей ----------
def _validate(name: str | None, max_student_uploads: int | None, max_group_size: int | None,
              max_groups: int | None) -> None:
    if name is not None and not name.strip():
        raise BadRequest("Name field is mandatory")
    if max_student_uploads is not None and max_student_uploads < 1:
        raise BadRequest("Max student uploads must be greater than 0")
    if max_group_size is not None and max_group_size < 2:
        raise BadRequest("Max group size must be greater than 1")
    if max_groups is not None and max_groups < 1:
        raise BadRequest("Max groups must be greater than 0")


# ---------- CRUD ----------
def create_project(data: ProjectIn) -> Project:
    _validate(data.name, data.max_student_uploads, data.max_group_size, data.max_groups)
    project = Project(
        name=data.name.strip(),
        year=data.year or utcnow().year,
        max_student_uploads=data.max_student_uploads,
        max_group_size=data.max_group_size,
        max_groups=data.max_groups,
        deliverable_selection_deadline=as_utc_naive(data.deliverable_selection_deadline),
        active=data.active,
    )
    db.session.add(project)
    db.session.commit()
    log.info("project %s created", project.project_id)
    return project


def update_project(project: Project, data: ProjectUpdateIn) -> Project:
    fields = data.model_dump(exclude_unset=True)
    if not fields:
        raise BadRequest("At least one field must be provided")
    _validate(data.name if "name" in fields else None, data.max_student_uploads,
              data.max_group_size, data.max_groups)
    for key, value in fields.items():
        # null допустим только для дедлайна
        if value is None and key != "deliverable_selection_deadline":
            raise BadRequest(f"{key} cannot be null")
        if key == "name":
            value = value.strip()
        elif key == "deliverable_selection_deadline":
            value = as_utc_naive(value)
        setattr(project, key, value)
    db.session.commit()
    return project


def delete_project(project: Project) -> None:
    # группы, коды, ярмарки, каталоги и выборы удаляются каскадом в БД
    db.session.delete(project)
    db.session.commit()
    log.info("project %s deleted", project.project_id)


# ---------- координаторы ----------
def assign_coordinator(project: Project, admin_id: int) -> CoordinatorProject:
    admin = db.session.get(Admin, admin_id)
    if admin is None:
        raise NotFound("Admin not found")
    if not is_coordinator(admin):
        raise BadRequest("Only Coordinators can be assigned to projects")
    existing = db.session.query(CoordinatorProject).filter_by(project_id=project.project_id).first()
    if existing is not None:
        raise Conflict(
            "Project can only have one coordinator. Remove the existing coordinator first.",
            detail=f"project {project.project_id} already has coordinator {existing.admin_id}",
        )
    assignment = CoordinatorProject(admin_id=admin.admin_id, project_id=project.project_id)
    db.session.add(assignment)
    db.session.commit()
    return assignment


def project_coordinators(project: Project) -> list[CoordinatorProject]:
    return (db.session.query(CoordinatorProject)
            .filter_by(project_id=project.project_id)
            .order_by(CoordinatorProject.assigned_at)
            .all())


def remove_coordinator(project: Project, admin_id: int) -> None:
    assignment = db.session.query(CoordinatorProject).filter_by(
        project_id=project.project_id, admin_id=admin_id
    ).first()
    if assignment is None:
        raise NotFound("Coordinator not assigned to this project")
    db.session.delete(assignment)
    db.session.commit()


# ---------- студент ----------
def student_projects(student_id: int) -> list[tuple[Project, Group, GroupMember]]:
    return (db.session.query(Project, Group, GroupMember)
            .join(Group, Group.project_id == Project.project_id)
            .join(GroupMember, GroupMember.group_id == Group.group_id)
            .filter(GroupMember.student_id == student_id)
            .order_by(Project.year.desc(), Project.project_id)
            .all())
