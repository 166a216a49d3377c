"""
Idempotent seed-скрипт.
Запуск:
  python seed.py --reset   # дропнуть и пересоздать схему, роли, root-админ и демо-данные
  python seed.py --demo    # роли + root-админ + демо-проект (если его ещё нет)
  python seed.py           # только роли и root-админ
"""
from datetime import timedelta
import argparse
import os

from flask_migrate import upgrade
from sqlalchemy import text

from app import create_app
from bootstrap import ensure_default_admin, seed_roles
from extensions import db
from models import (
    AvailableStudentRole, GroupDeliverable, GroupDeliverableComponent, GroupDeliverablesComponent,
    Project, SecurityCode, StudentDeliverable, utcnow,
)

DEMO_PROJECT = "Demo Project"
MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "migrations")


def get_or_create(model, defaults=None, **by):
    """Идемпотентное создание по уникальным ключам."""
    inst = db.session.query(model).filter_by(**by).first()
    if inst:
        return inst, False
    inst = model(**{**(defaults or {}), **by})
    db.session.add(inst)
    db.session.flush()
    return inst, True


def seed_demo() -> bool:
    """Проект с каталогом и кодами для лидера и участника."""
    project, created = get_or_create(
        Project,
        defaults=dict(max_student_uploads=10, max_group_size=4, max_groups=10,
                      deliverable_selection_deadline=utcnow() + timedelta(days=30), active=True),
        name=DEMO_PROJECT, year=utcnow().year,
    )
    if not created:
        return False

    pid = project.project_id
    backend, _ = get_or_create(GroupDeliverable, project_id=pid, name="Backend Service")
    frontend, _ = get_or_create(GroupDeliverable, project_id=pid, name="Web Client")
    api, _ = get_or_create(GroupDeliverableComponent, project_id=pid, name="REST API")
    storage, _ = get_or_create(GroupDeliverableComponent, project_id=pid, name="Storage Layer")
    ui, _ = get_or_create(GroupDeliverableComponent, project_id=pid, name="User Interface")
    for deliverable, component, qty in ((backend, api, 1), (backend, storage, 1), (frontend, ui, 2)):
        get_or_create(
            GroupDeliverablesComponent, defaults={"quantity": qty},
            group_deliverable_id=deliverable.group_deliverable_id,
            group_deliverable_component_id=component.group_deliverable_component_id,
        )
    get_or_create(StudentDeliverable, project_id=pid, name="Individual Report")

    expiration = utcnow() + timedelta(days=30)
    for role, code in ((AvailableStudentRole.GROUP_LEADER, "LEA-001"), (AvailableStudentRole.MEMBER, "MEM-001")):
        get_or_create(SecurityCode, defaults={"project_id": pid, "user_role_id": int(role),
                                              "expiration": expiration}, code=code)
    db.session.commit()
    return True


def prepare_schema(reset: bool = False) -> None:
    """Схема только из миграций: alembic_version всегда совпадает с таблицами."""
    if reset:
        db.drop_all()
        with db.engine.begin() as conn:
            conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
    upgrade(directory=MIGRATIONS_DIR)


# ---- main ----
def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop + create + full seed (demo)")
    parser.add_argument("--demo", action="store_true", help="add demo project, catalog and codes")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            prepare_schema(reset=True)
            seed_roles()
            ensure_default_admin()
            seed_demo()
            print("[seed] reset+seed complete")
            return

        prepare_schema()
        seed_roles()
        admin = ensure_default_admin()
        print("[seed] roles ok, default admin:", admin.email if admin else "not configured")
        if args.demo:
            print("[seed] demo project created" if seed_demo() else "[seed] demo project already exists")


if __name__ == "__main__":
    main()
