from datetime import timedelta

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from app import create_app
from bootstrap import ensure_default_admin, seed_roles
from extensions import db
from models import (
    ADMIN_ROLE_NAMES, Admin, AdminRole, AvailableAdminRole, Fair, Group, GroupComponentImplementationDetail,
    GroupDeliverable, GroupDeliverableComponent, GroupDeliverableSelection, GroupDeliverablesComponent,
    GroupMember, SecurityCode, Student, StudentDeliverable, StudentDeliverableSelection, StudentUpload,
    Transaction, utcnow,
)
from conftest import make_admin, make_code, make_group, make_project, make_student
from seed import prepare_schema


def test_project_delete_cascades(app):
    project = make_project()
    pid = project.project_id
    make_code(project)
    student = make_student()
    seller = make_group(project, make_student(), name="Seller", members=[student])
    buyer = make_group(project, make_student(), name="Buyer")

    deliverable = GroupDeliverable(project_id=pid, name="Backend")
    component = GroupDeliverableComponent(project_id=pid, name="API")
    fair = Fair(project_id=pid, details="fair", start_date=utcnow(), end_date=utcnow() + timedelta(days=1))
    personal = StudentDeliverable(project_id=pid, name="Report")
    db.session.add_all([deliverable, component, fair, personal])
    db.session.flush()
    db.session.add(GroupDeliverablesComponent(group_deliverable_id=deliverable.group_deliverable_id,
                                              group_deliverable_component_id=component.group_deliverable_component_id,
                                              quantity=1))
    selection = GroupDeliverableSelection(group_id=seller.group_id,
                                          group_deliverable_id=deliverable.group_deliverable_id)
    student_selection = StudentDeliverableSelection(student_id=student.student_id,
                                                    student_deliverable_id=personal.student_deliverable_id)
    db.session.add_all([selection, student_selection])
    db.session.flush()
    db.session.add_all([
        GroupComponentImplementationDetail(
            group_deliverable_selection_id=selection.group_deliverable_selection_id,
            group_deliverable_component_id=component.group_deliverable_component_id,
            markdown_description="# API", repository_link="https://git.example/api",
        ),
        Transaction(buyer_group_id=buyer.group_id, fair_id=fair.fair_id,
                    group_deliverable_selection_id=selection.group_deliverable_selection_id),
        StudentUpload(student_deliverable_selection_id=student_selection.student_deliverable_selection_id,
                      path="uploads/report.pdf"),
    ])
    db.session.commit()

    db.session.delete(project)
    db.session.commit()

    for model in (Group, GroupMember, SecurityCode, Fair, GroupDeliverable, GroupDeliverableComponent,
                  GroupDeliverablesComponent, GroupDeliverableSelection, GroupComponentImplementationDetail,
                  Transaction, StudentDeliverable, StudentDeliverableSelection, StudentUpload):
        assert db.session.query(model).count() == 0, model.__name__
    # студенты живут дольше проекта
    assert db.session.get(Student, student.student_id) is not None


def test_admin_role_in_use_cannot_be_deleted(app):
    make_admin(AvailableAdminRole.TUTOR)
    db.session.delete(db.session.get(AdminRole, int(AvailableAdminRole.TUTOR)))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()
    assert db.session.get(AdminRole, int(AvailableAdminRole.TUTOR)) is not None


def test_seed_roles_is_idempotent_and_fixes_names(app):
    assert seed_roles() == 0
    row = db.session.get(AdminRole, int(AvailableAdminRole.TUTOR))
    row.name = "Teaching Assistant"
    db.session.commit()

    assert seed_roles() == 1
    assert db.session.get(AdminRole, int(AvailableAdminRole.TUTOR)).name == ADMIN_ROLE_NAMES[AvailableAdminRole.TUTOR]


def test_default_admin(app):
    app.config.update(DEFAULT_ADMIN_EMAIL="", DEFAULT_ADMIN_PASSWORD="")
    assert ensure_default_admin() is None

    app.config.update(DEFAULT_ADMIN_EMAIL="Root@Example.com", DEFAULT_ADMIN_PASSWORD="changeme")
    admin = ensure_default_admin()
    assert admin.email == "root@example.com"
    assert admin.admin_role_id == AvailableAdminRole.ROOT
    assert admin.check_password("changeme")
    assert ensure_default_admin().admin_id == admin.admin_id
    assert db.session.query(Admin).count() == 1


def test_uploads_follow_student_selection(app):
    project = make_project()
    student = make_student()
    deliverable = StudentDeliverable(project_id=project.project_id, name="Report")
    db.session.add(deliverable)
    db.session.flush()
    selection = StudentDeliverableSelection(student_id=student.student_id,
                                            student_deliverable_id=deliverable.student_deliverable_id)
    db.session.add(selection)
    db.session.flush()
    db.session.add(StudentUpload(student_deliverable_selection_id=selection.student_deliverable_selection_id,
                                 path="uploads/report.pdf"))
    db.session.commit()

    db.session.delete(selection)
    db.session.commit()
    assert db.session.query(StudentUpload).count() == 0


def test_seed_schema_is_built_by_migrations():
    app = create_app("test")
    with app.app_context():
        prepare_schema()
        inspector = inspect(db.engine)
        assert db.session.execute(text("SELECT version_num FROM alembic_version")).scalar() == "0003"
        assert {"coordinator_projects", "group_component_implementation_details"} <= set(inspector.get_table_names())
        assert "link" not in {c["name"] for c in inspector.get_columns("group_deliverable_selections")}

        prepare_schema(reset=True)
        assert db.session.execute(text("SELECT version_num FROM alembic_version")).scalar() == "0003"
        db.session.remove()
