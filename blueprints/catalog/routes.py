from __future__ import annotations

from flask import jsonify, request

from blueprints.auth.routes import admin_required, current_account
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from models import AvailableAdminRole as R
from . import api_bp, services as svc
from .schemas import (
    CatalogItemIn, CatalogItemUpdateIn, GroupComponentOut, GroupDeliverableOut, GroupMappingIn,
    GroupMappingOut, QuantityUpdateIn, StudentComponentOut, StudentDeliverableOut, StudentMappingIn,
    StudentMappingOut,
)

OWNERS = (R.ROOT, R.PROFESSOR)

SCHEMAS = {
    "group": (GroupDeliverableOut, GroupComponentOut, GroupMappingIn, GroupMappingOut),
    "student": (StudentDeliverableOut, StudentComponentOut, StudentMappingIn, StudentMappingOut),
}


def _register_items(fl: svc.Flavour, model, base: str, out_schema, related: str) -> None:
    """CRUD одного справочника (поставки или компоненты) под /admins/<base>."""
    endpoint = base.replace("-", "_")

    @admin_required(*OWNERS)
    def create():
        data = parse_body(CatalogItemIn)
        item = svc.create_item(fl, model, current_account(), project_id=data.project_id, name=data.name)
        return created(dump(out_schema, item))

    @admin_required
    def list_all():
        project_id = request.args.get("project_id", type=int)
        return jsonify(dump_many(out_schema, svc.items_query(fl, model, current_account(), project_id).all()))

    @admin_required
    def list_by_project(project_id: int):
        return jsonify(dump_many(out_schema, svc.items_query(fl, model, current_account(), project_id).all()))

    @admin_required
    def get_one(item_id: int):
        return jsonify(dump(out_schema, svc.get_item(fl, model, current_account(), item_id)))

    @admin_required
    def related_list(item_id: int):
        _, _, _, mapping_out = SCHEMAS[fl.prefix]
        rows = svc.mappings_of(fl, model, current_account(), item_id)
        return jsonify(dump_many(mapping_out, [svc.mapping_row(fl, m) for m in rows]))

    @admin_required(*OWNERS)
    def update(item_id: int):
        item = svc.get_item(fl, model, current_account(), item_id)
        data = parse_body(CatalogItemUpdateIn)
        return jsonify(dump(out_schema, svc.rename_item(fl, model, item, data.name)))

    @admin_required(*OWNERS)
    def delete(item_id: int):
        svc.delete_item(svc.get_item(fl, model, current_account(), item_id))
        return no_content()

    url = f"/admins/{base}"
    api_bp.add_url_rule(url, f"{endpoint}_create", create, methods=["POST"])
    api_bp.add_url_rule(url, f"{endpoint}_list", list_all, methods=["GET"])
    api_bp.add_url_rule(f"{url}/project/<int:project_id>", f"{endpoint}_by_project", list_by_project,
                        methods=["GET"])
    api_bp.add_url_rule(f"{url}/<int:item_id>", f"{endpoint}_get", get_one, methods=["GET"])
    api_bp.add_url_rule(f"{url}/<int:item_id>/{related}", f"{endpoint}_{related}", related_list,
                        methods=["GET"])
    api_bp.add_url_rule(f"{url}/<int:item_id>", f"{endpoint}_update", update, methods=["PATCH"])
    api_bp.add_url_rule(f"{url}/<int:item_id>", f"{endpoint}_delete", delete, methods=["DELETE"])


def _register_mappings(fl: svc.Flavour) -> None:
    _, _, mapping_in, mapping_out = SCHEMAS[fl.prefix]
    base = f"{fl.prefix}-deliverables-components"
    endpoint = base.replace("-", "_")

    def rows_out(rows) -> list[dict]:
        return dump_many(mapping_out, [svc.mapping_row(fl, m) for m in rows])

    @admin_required(*OWNERS)
    def create():
        data = parse_body(mapping_in)
        mapping = svc.create_mapping(
            fl, current_account(),
            deliverable_id=getattr(data, fl.deliverable_key),
            component_id=getattr(data, fl.component_key),
            quantity=data.quantity,
        )
        return created(dump(mapping_out, svc.mapping_row(fl, mapping)))

    @admin_required
    def by_deliverable(deliverable_id: int):
        return jsonify(rows_out(svc.mappings_of(fl, fl.deliverable, current_account(), deliverable_id)))

    @admin_required
    def by_component(component_id: int):
        return jsonify(rows_out(svc.mappings_of(fl, fl.component, current_account(), component_id)))

    @admin_required(*OWNERS)
    def update(mapping_id: int):
        mapping = svc.get_mapping(fl, current_account(), mapping_id)
        data = parse_body(QuantityUpdateIn)
        return jsonify(dump(mapping_out, svc.mapping_row(fl, svc.update_mapping(mapping, data.quantity))))

    @admin_required(*OWNERS)
    def delete(mapping_id: int):
        svc.delete_item(svc.get_mapping(fl, current_account(), mapping_id))
        return no_content()

    url = f"/admins/{base}"
    api_bp.add_url_rule(url, f"{endpoint}_create", create, methods=["POST"])
    api_bp.add_url_rule(f"{url}/components/<int:deliverable_id>", f"{endpoint}_by_deliverable",
                        by_deliverable, methods=["GET"])
    api_bp.add_url_rule(f"{url}/deliverables/<int:component_id>", f"{endpoint}_by_component",
                        by_component, methods=["GET"])
    api_bp.add_url_rule(f"{url}/<int:mapping_id>", f"{endpoint}_update", update, methods=["PATCH"])
    api_bp.add_url_rule(f"{url}/<int:mapping_id>", f"{endpoint}_delete", delete, methods=["DELETE"])


for _fl in svc.FLAVOURS:
    deliverable_out, component_out, _, _ = SCHEMAS[_fl.prefix]
    _register_items(_fl, _fl.deliverable, f"{_fl.prefix}-deliverables", deliverable_out, "components")
    _register_items(_fl, _fl.component, f"{_fl.prefix}-deliverable-components", component_out, "deliverables")
    _register_mappings(_fl)
