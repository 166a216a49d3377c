from __future__ import annotations

import pytest

from extensions import db
from models import AvailableAdminRole as R, CoordinatorProject, GroupDeliverablesComponent
from conftest import auth, make_admin, make_project


@pytest.fixture()
def root_headers(app):
    return auth(make_admin())


def _item(client, headers, kind, project_id, name):
    rv = client.post(f"/api/v1/admins/{kind}", json={"project_id": project_id, "name": name}, headers=headers)
    assert rv.status_code == 201, rv.get_json()
    return rv.get_json()


@pytest.mark.parametrize("prefix", ["group", "student"])
def test_catalog_crud(client, root_headers, prefix):
    project = make_project()
    pid = project.project_id
    deliverable = _item(client, root_headers, f"{prefix}-deliverables", pid, "Backend")
    component = _item(client, root_headers, f"{prefix}-deliverable-components", pid, "API")
    d_id = deliverable[f"{prefix}_deliverable_id"]
    c_id = component[f"{prefix}_deliverable_component_id"]

    rv = client.post(f"/api/v1/admins/{prefix}-deliverables", json={"project_id": pid, "name": "Backend"},
                     headers=root_headers)
    assert rv.status_code == 409
    assert rv.get_json()["error"] == "Deliverable with this name already exists for the project"

    mapping_url = f"/api/v1/admins/{prefix}-deliverables-components"
    payload = {f"{prefix}_deliverable_id": d_id, f"{prefix}_deliverable_component_id": c_id, "quantity": 2}
    rv = client.post(mapping_url, json=payload, headers=root_headers)
    assert rv.status_code == 201
    mapping = rv.get_json()
    assert mapping["component_name"] == "API" and mapping["deliverable_name"] == "Backend"
    rv = client.post(mapping_url, json=payload, headers=root_headers)
    assert rv.status_code == 409 and rv.get_json()["error"] == "Relationship already exists"

    rows = client.get(f"/api/v1/admins/{prefix}-deliverables/{d_id}/components", headers=root_headers).get_json()
    assert [(r[f"{prefix}_deliverable_component_id"], r["quantity"]) for r in rows] == [(c_id, 2)]
    rows = client.get(f"{mapping_url}/deliverables/{c_id}", headers=root_headers).get_json()
    assert [r[f"{prefix}_deliverable_id"] for r in rows] == [d_id]

    rv = client.patch(f"{mapping_url}/{mapping['id']}", json={"quantity": 5}, headers=root_headers)
    assert rv.get_json()["quantity"] == 5
    assert client.patch(f"{mapping_url}/{mapping['id']}", json={"quantity": 0},
                        headers=root_headers).status_code == 400

    rv = client.patch(f"/api/v1/admins/{prefix}-deliverables/{d_id}", json={"name": "Server"}, headers=root_headers)
    assert rv.get_json()["name"] == "Server"
    listed = client.get(f"/api/v1/admins/{prefix}-deliverables/project/{pid}", headers=root_headers).get_json()
    assert [d["name"] for d in listed] == ["Server"]

    # удаление компонента уносит строки состава
    assert client.delete(f"/api/v1/admins/{prefix}-deliverable-components/{c_id}",
                         headers=root_headers).status_code == 204
    assert client.get(f"{mapping_url}/components/{d_id}", headers=root_headers).get_json() == []


def test_mapping_requires_same_project_and_positive_quantity(client, root_headers):
    a, b = make_project("A"), make_project("B")
    deliverable = _item(client, root_headers, "group-deliverables", a.project_id, "D")
    foreign = _item(client, root_headers, "group-deliverable-components", b.project_id, "C")
    local = _item(client, root_headers, "group-deliverable-components", a.project_id, "C")
    url = "/api/v1/admins/group-deliverables-components"

    rv = client.post(url, headers=root_headers, json={
        "group_deliverable_id": deliverable["group_deliverable_id"],
        "group_deliverable_component_id": foreign["group_deliverable_component_id"],
        "quantity": 1,
    })
    assert rv.status_code == 400
    rv = client.post(url, headers=root_headers, json={
        "group_deliverable_id": deliverable["group_deliverable_id"],
        "group_deliverable_component_id": local["group_deliverable_component_id"],
        "quantity": 0,
    })
    assert rv.status_code == 400
    assert db.session.query(GroupDeliverablesComponent).count() == 0


def test_unknown_items_are_404(client, root_headers):
    rv = client.get("/api/v1/admins/group-deliverables/999", headers=root_headers)
    assert rv.status_code == 404 and rv.get_json()["error"] == "Group deliverable not found"
    rv = client.get("/api/v1/admins/student-deliverable-components/999", headers=root_headers)
    assert rv.get_json()["error"] == "Student component not found"


def test_catalog_permissions(client, root_headers):
    mine, other = make_project("Mine"), make_project("Other")
    tutor = make_admin(R.TUTOR)
    coordinator = make_admin(R.COORDINATOR)
    db.session.add(CoordinatorProject(admin_id=coordinator.admin_id, project_id=mine.project_id))
    db.session.commit()
    _item(client, root_headers, "group-deliverables", mine.project_id, "Mine D")
    _item(client, root_headers, "group-deliverables", other.project_id, "Other D")

    rv = client.post("/api/v1/admins/group-deliverables", json={"project_id": mine.project_id, "name": "X"},
                     headers=auth(tutor))
    assert rv.status_code == 403
    assert len(client.get("/api/v1/admins/group-deliverables", headers=auth(tutor)).get_json()) == 2

    listed = client.get("/api/v1/admins/group-deliverables", headers=auth(coordinator)).get_json()
    assert [d["name"] for d in listed] == ["Mine D"]
    rv = client.get(f"/api/v1/admins/group-deliverables/project/{other.project_id}", headers=auth(coordinator))
    assert rv.status_code == 403
