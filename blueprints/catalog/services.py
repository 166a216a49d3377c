"""Каталог поставок: два одинаковых набора таблиц (групповой и индивидуальный)."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Type

from blueprints.core.errors import BadRequest, Conflict, NotFound
from blueprints.projects.services import assigned_project_ids, ensure_project_access, is_coordinator
from extensions import db
from models import (
    Admin,
    GroupDeliverable, GroupDeliverableComponent, GroupDeliverablesComponent,
    StudentDeliverable, StudentDeliverableComponent, StudentDeliverablesComponent,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Flavour:
    prefix: str
    label: str
    deliverable: Type[db.Model]
    component: Type[db.Model]
    mapping: Type[db.Model]

    @property
    def deliverable_key(self) -> str:
        return f"{self.prefix}_deliverable_id"

    @property
    def component_key(self) -> str:
        return f"{self.prefix}_deliverable_component_id"

    def pk_of(self, model) -> str:
        return self.deliverable_key if model is self.deliverable else self.component_key


GROUP = Flavour("group", "Group", GroupDeliverable, GroupDeliverableComponent, GroupDeliverablesComponent)
STUDENT = Flavour("student", "Student", StudentDeliverable, StudentDeliverableComponent,
                  StudentDeliverablesComponent)
FLAVOURS = (GROUP, STUDENT)


def _kind(fl: Flavour, model) -> str:
    return "deliverable" if model is fl.deliverable else "component"


def _clean_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise BadRequest("Name cannot be empty")
    return name.strip()


# ---------- поставки и компоненты ----------
def get_item(fl: Flavour, model, admin: Admin, item_id: int):
    item = db.session.get(model, item_id)
    if item is None:
        raise NotFound(f"{fl.label} {_kind(fl, model)} not found")
    ensure_project_access(admin, item.project_id)
    return item


def items_query(fl: Flavour, model, admin: Admin, project_id: int | None = None):
    q = db.session.query(model).order_by(getattr(model, fl.pk_of(model)))
    if project_id is not None:
        ensure_project_access(admin, project_id)
        q = q.filter(model.project_id == project_id)
    elif is_coordinator(admin):
        q = q.filter(model.project_id.in_(assigned_project_ids(admin)))
    return q


def _name_taken(model, project_id: int, name: str) -> bool:
    q = db.session.query(model).filter(model.project_id == project_id, model.name == name)
    return q.first() is not None


def create_item(fl: Flavour, model, admin: Admin, *, project_id: int, name: str):
    name = _clean_name(name)
    ensure_project_access(admin, project_id)
    if _name_taken(model, project_id, name):
        raise Conflict(f"{_kind(fl, model).capitalize()} with this name already exists for the project")
    item = model(project_id=project_id, name=name)
    db.session.add(item)
    db.session.commit()
    log.info("%s %s %s created in project %s", fl.prefix, _kind(fl, model), name, project_id)
    return item


def rename_item(fl: Flavour, model, item, name: str):
    name = _clean_name(name)
    if name != item.name and _name_taken(model, item.project_id, name):
        raise Conflict(f"{_kind(fl, model).capitalize()} with this name already exists for the project")
    item.name = name
    db.session.commit()
    return item


def delete_item(item) -> None:
    db.session.delete(item)
    db.session.commit()


# ---------- состав поставок ----------
def mapping_row(fl: Flavour, m) -> dict:
    return {
        "id": m.id,
        fl.deliverable_key: getattr(m, fl.deliverable_key),
        fl.component_key: getattr(m, fl.component_key),
        "quantity": m.quantity,
        "component_name": m.component.name,
        "deliverable_name": m.deliverable.name,
    }


def _check_quantity(quantity: int) -> int:
    if quantity < 1:
        raise BadRequest("Quantity must be greater than 0")
    return quantity


def create_mapping(fl: Flavour, admin: Admin, *, deliverable_id: int, component_id: int, quantity: int):
    deliverable = get_item(fl, fl.deliverable, admin, deliverable_id)
    component = get_item(fl, fl.component, admin, component_id)
    if deliverable.project_id != component.project_id:
        raise BadRequest("Deliverable and component must belong to the same project")
    _check_quantity(quantity)
    exists = db.session.query(fl.mapping).filter(
        getattr(fl.mapping, fl.deliverable_key) == deliverable_id,
        getattr(fl.mapping, fl.component_key) == component_id,
    ).first()
    if exists is not None:
        raise Conflict("Relationship already exists")
    mapping = fl.mapping(**{fl.deliverable_key: deliverable_id, fl.component_key: component_id,
                            "quantity": quantity})
    db.session.add(mapping)
    db.session.commit()
    return mapping


def mappings_of(fl: Flavour, model, admin: Admin, item_id: int) -> list:
    """Компоненты поставки или поставки, в которые входит компонент."""
    get_item(fl, model, admin, item_id)
    column = getattr(fl.mapping, fl.pk_of(model))
    return db.session.query(fl.mapping).filter(column == item_id).order_by(fl.mapping.id).all()


def get_mapping(fl: Flavour, admin: Admin, mapping_id: int):
    mapping = db.session.get(fl.mapping, mapping_id)
    if mapping is None:
        raise NotFound("Relationship not found")
    ensure_project_access(admin, mapping.deliverable.project_id)
    return mapping


def update_mapping(mapping, quantity: int):
    mapping.quantity = _check_quantity(quantity)
    db.session.commit()
    return mapping
