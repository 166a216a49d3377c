from __future__ import annotations
from datetime import timedelta

import pytest

from extensions import db
from models import (
    AvailableAdminRole as R, GroupDeliverable, GroupDeliverableComponent, GroupDeliverablesComponent,
    StudentDeliverable, utcnow,
)
from conftest import auth, make_admin, make_group, make_project, make_student


@pytest.fixture()
def world(app):
    """Проект с каталогом, группа из лидера и участника."""
    project = make_project()
    backend = GroupDeliverable(project_id=project.project_id, name="Backend")
    api = GroupDeliverableComponent(project_id=project.project_id, name="API")
    storage = GroupDeliverableComponent(project_id=project.project_id, name="Storage")
    ui = GroupDeliverableComponent(project_id=project.project_id, name="UI")
    report = StudentDeliverable(project_id=project.project_id, name="Report")
    essay = StudentDeliverable(project_id=project.project_id, name="Essay")
    db.session.add_all([backend, api, storage, ui, report, essay])
    db.session.flush()
    for component in (api, storage):
        db.session.add(GroupDeliverablesComponent(
            group_deliverable_id=backend.group_deliverable_id,
            group_deliverable_component_id=component.group_deliverable_component_id, quantity=1,
        ))
    db.session.commit()
    leader, mate = make_student(), make_student()
    group = make_group(project, leader, members=[mate])
    return dict(project=project, backend=backend, api=api, storage=storage, ui=ui, report=report, essay=essay,
                leader=leader, mate=mate, group=group)


def _select(client, w, student=None):
    return client.post(f"/api/v1/students/group-deliverable-selections/{w['group'].group_id}",
                       json={"group_deliverable_id": w["backend"].group_deliverable_id},
                       headers=auth(student or w["leader"]))


def test_group_selection(client, world):
    assert _select(client, world, world["mate"]).status_code == 403
    rv = _select(client, world)
    assert rv.status_code == 201
    assert rv.get_json()["message"] == "Deliverable selected successfully"
    rv = _select(client, world)
    assert rv.status_code == 409

    rv = client.get(f"/api/v1/students/group-deliverable-selections/{world['group'].group_id}",
                    headers=auth(world["mate"]))
    body = rv.get_json()
    assert body["group_deliverable_name"] == "Backend"
    assert {c["component_name"] for c in body["components"]} == {"API", "Storage"}


def test_group_selection_rules(client, world):
    other = make_project("Other")
    foreign = GroupDeliverable(project_id=other.project_id, name="Foreign")
    db.session.add(foreign)
    db.session.commit()
    url = f"/api/v1/students/group-deliverable-selections/{world['group'].group_id}"
    headers = auth(world["leader"])

    rv = client.post(url, json={"group_deliverable_id": foreign.group_deliverable_id}, headers=headers)
    assert rv.status_code == 400
    assert client.post(url, json={"group_deliverable_id": 999}, headers=headers).status_code == 404
    assert client.get(url, headers=headers).status_code == 404

    world["project"].deliverable_selection_deadline = utcnow() - timedelta(minutes=1)
    db.session.commit()
    rv = _select(client, world)
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "Deliverable selection deadline has passed"


def test_implementation_details(client, world):
    url = f"/api/v1/students/group-component-implementation-details/{world['group'].group_id}"
    leader = auth(world["leader"])
    api_id = world["api"].group_deliverable_component_id
    payload = {"group_deliverable_component_id": api_id, "markdown_description": "# API",
               "repository_link": "https://git.example/api"}

    rv = client.post(url, json=payload, headers=leader)
    assert rv.status_code == 404 and rv.get_json()["error"] == "Group must select a deliverable first"
    _select(client, world)

    assert client.post(url, json={**payload, "markdown_description": " "}, headers=leader).status_code == 400
    assert client.post(url, json={**payload, "repository_link": ""}, headers=leader).status_code == 400
    assert client.post(url, json=payload, headers=auth(world["mate"])).status_code == 403
    rv = client.post(url, json={**payload, "group_deliverable_component_id": world["ui"].group_deliverable_component_id},
                     headers=leader)
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Component is not part of the selected deliverable"

    rv = client.post(url, json=payload, headers=leader)
    assert rv.status_code == 201 and rv.get_json()["component_name"] == "API"
    assert client.post(url, json=payload, headers=leader).status_code == 409

    rv = client.patch(url, json={**payload, "repository_link": "https://git.example/api-v2"}, headers=leader)
    assert rv.get_json()["repository_link"] == "https://git.example/api-v2"
    details = client.get(url, headers=auth(world["mate"])).get_json()["details"]
    assert [d["group_deliverable_component_id"] for d in details] == [api_id]

    storage = {"group_deliverable_component_id": world["storage"].group_deliverable_component_id}
    assert client.delete(url, json=storage, headers=leader).status_code == 404
    assert client.delete(url, json={"group_deliverable_component_id": api_id}, headers=leader).status_code == 204
    assert client.get(url, headers=leader).get_json()["details"] == []


def test_student_selection(client, world):
    url = "/api/v1/students/deliverable-selection"
    pid = world["project"].project_id
    mate = auth(world["mate"])
    payload = {"student_deliverable_id": world["report"].student_deliverable_id, "project_id": pid}

    outsider = make_student()
    assert client.post(url, json=payload, headers=auth(outsider)).status_code == 403
    rv = client.post(url, json=payload, headers=mate)
    assert rv.status_code == 201 and rv.get_json()["student_deliverable_name"] == "Report"
    assert client.post(url, json=payload, headers=mate).status_code == 409

    rv = client.patch(url, json={**payload, "student_deliverable_id": world["essay"].student_deliverable_id},
                      headers=mate)
    assert rv.status_code == 200 and rv.get_json()["student_deliverable_name"] == "Essay"

    assert client.get(f"{url}/project/{pid}", headers=mate).get_json()["student_deliverable_name"] == "Essay"
    assert client.delete(f"{url}/project/{pid}", headers=mate).status_code == 204
    assert client.get(f"{url}/project/{pid}", headers=mate).status_code == 404
    assert client.delete(f"{url}/project/{pid}", headers=mate).status_code == 404


def test_student_selection_wrong_project(client, world):
    other = make_project("Other")
    foreign = StudentDeliverable(project_id=other.project_id, name="Foreign")
    db.session.add(foreign)
    db.session.commit()
    rv = client.post("/api/v1/students/deliverable-selection", headers=auth(world["leader"]), json={
        "student_deliverable_id": foreign.student_deliverable_id, "project_id": world["project"].project_id,
    })
    assert rv.status_code == 400


def test_admin_listings(client, world):
    _select(client, world)
    client.post(f"/api/v1/students/group-component-implementation-details/{world['group'].group_id}",
                headers=auth(world["leader"]),
                json={"group_deliverable_component_id": world["api"].group_deliverable_component_id,
                      "markdown_description": "d", "repository_link": "l"})
    client.post("/api/v1/students/deliverable-selection", headers=auth(world["mate"]), json={
        "student_deliverable_id": world["report"].student_deliverable_id, "project_id": world["project"].project_id,
    })
    headers = auth(make_admin(R.TUTOR))
    pid = world["project"].project_id

    body = client.get(f"/api/v1/admins/group-deliverable-selections/projects/{pid}", headers=headers).get_json()
    assert body["project_name"] == world["project"].name
    selection = body["selections"][0]
    assert selection["group_deliverable_name"] == "Backend"
    assert selection["component_implementation_details"][0]["component_name"] == "API"

    body = client.get(f"/api/v1/admins/student-deliverable-selections/projects/{pid}", headers=headers).get_json()
    assert [s["student_id"] for s in body["selections"]] == [world["mate"].student_id]

    details = client.get(f"/api/v1/admins/groups/{world['group'].group_id}", headers=headers).get_json()
    assert details["deliverable_selection"]["name"] == "Backend"
    assert len(details["deliverable_selection"]["component_implementation_details"]) == 1
