from __future__ import annotations

from extensions import db
from models import AvailableAdminRole as R, Group, Project, SecurityCode, utcnow
from conftest import auth, make_admin, make_code, make_group, make_project, make_student

PROJECT = {"name": "Fair 2025", "max_student_uploads": 5, "max_group_size": 4, "max_groups": 8}


def test_create_project_defaults(client):
    rv = client.post("/api/v1/admins/projects", json=PROJECT, headers=auth(make_admin(R.PROFESSOR)))
    assert rv.status_code == 201
    body = rv.get_json()
    assert body["year"] == utcnow().year
    assert body["active"] is True
    assert body["deliverable_selection_deadline"] is None


def test_create_project_validation(client):
    headers = auth(make_admin())
    cases = [
        ({**PROJECT, "name": " "}, "Name field is mandatory"),
        ({**PROJECT, "max_student_uploads": 0}, "Max student uploads must be greater than 0"),
        ({**PROJECT, "max_group_size": 1}, "Max group size must be greater than 1"),
        ({**PROJECT, "max_groups": 0}, "Max groups must be greater than 0"),
    ]
    for payload, message in cases:
        rv = client.post("/api/v1/admins/projects", json=payload, headers=headers)
        assert rv.status_code == 400
        assert rv.get_json()["error"] == message


def test_tutor_cannot_create_or_patch(client):
    tutor = make_admin(R.TUTOR)
    project = make_project()
    assert client.post("/api/v1/admins/projects", json=PROJECT, headers=auth(tutor)).status_code == 403
    assert client.patch(f"/api/v1/admins/projects/{project.project_id}", json={"name": "x"},
                        headers=auth(tutor)).status_code == 403
    assert client.get(f"/api/v1/admins/projects/{project.project_id}", headers=auth(tutor)).status_code == 200


def test_update_project(client):
    project = make_project()
    headers = auth(make_admin())
    url = f"/api/v1/admins/projects/{project.project_id}"

    rv = client.patch(url, json={"deliverable_selection_deadline": "2030-01-01T10:00:00+02:00"}, headers=headers)
    assert rv.status_code == 200
    assert rv.get_json()["deliverable_selection_deadline"].startswith("2030-01-01T08:00:00")

    rv = client.patch(url, json={"deliverable_selection_deadline": None, "active": False}, headers=headers)
    assert rv.get_json()["deliverable_selection_deadline"] is None
    assert rv.get_json()["active"] is False

    assert client.patch(url, json={"name": None}, headers=headers).status_code == 400
    assert client.patch(url, json={}, headers=headers).status_code == 400
    assert client.patch(url, json={"max_group_size": 1}, headers=headers).status_code == 400


def test_delete_project_cascades(client):
    project = make_project()
    make_group(project, make_student())
    make_code(project)
    pid = project.project_id

    rv = client.delete(f"/api/v1/admins/projects/{pid}", headers=auth(make_admin()))
    assert rv.status_code == 204
    db.session.expunge_all()
    assert db.session.get(Project, pid) is None
    assert db.session.query(Group).filter_by(project_id=pid).count() == 0
    assert db.session.query(SecurityCode).filter_by(project_id=pid).count() == 0


def test_unknown_project_404(client):
    rv = client.get("/api/v1/admins/projects/999", headers=auth(make_admin()))
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Project not found"


# ---------- координаторы ----------
def test_coordinator_assignment_and_scope(client):
    root = make_admin()
    coordinator = make_admin(R.COORDINATOR)
    mine = make_project("Mine")
    other = make_project("Other")

    rv = client.post(f"/api/v1/admins/projects/{mine.project_id}/coordinators",
                     json={"admin_id": coordinator.admin_id}, headers=auth(root))
    assert rv.status_code == 201
    assert rv.get_json()["coordinator"]["admin_id"] == coordinator.admin_id

    headers = auth(coordinator)
    listed = client.get("/api/v1/admins/projects", headers=headers).get_json()
    assert [p["project_id"] for p in listed] == [mine.project_id]

    rv = client.get(f"/api/v1/admins/projects/{other.project_id}", headers=headers)
    assert rv.status_code == 403
    assert rv.get_json()["error"] == "Access denied - you are not assigned to this project"

    rv = client.patch(f"/api/v1/admins/projects/{mine.project_id}", json={"name": "Mine v2"}, headers=headers)
    assert rv.status_code == 200

    rv = client.get(f"/api/v1/admins/projects/{mine.project_id}/coordinators", headers=headers)
    assert [c["admin_id"] for c in rv.get_json()["coordinators"]] == [coordinator.admin_id]


def test_assign_coordinator_rules(client):
    root = make_admin()
    tutor = make_admin(R.TUTOR)
    c1 = make_admin(R.COORDINATOR)
    c2 = make_admin(R.COORDINATOR)
    project = make_project()
    url = f"/api/v1/admins/projects/{project.project_id}/coordinators"

    assert client.post(url, json={"admin_id": 999}, headers=auth(root)).status_code == 404
    assert client.post(url, json={"admin_id": tutor.admin_id}, headers=auth(root)).status_code == 400
    assert client.post(url, json={"admin_id": c1.admin_id}, headers=auth(root)).status_code == 201
    assert client.post(url, json={"admin_id": c2.admin_id}, headers=auth(root)).status_code == 409
    assert client.post(url, json={"admin_id": c2.admin_id}, headers=auth(c1)).status_code == 403

    assert client.delete(f"{url}/{c2.admin_id}", headers=auth(root)).status_code == 404
    assert client.delete(f"{url}/{c1.admin_id}", headers=auth(root)).status_code == 204
    assert client.post(url, json={"admin_id": c2.admin_id}, headers=auth(root)).status_code == 201


def test_student_projects(client):
    student = make_student()
    project = make_project()
    make_project("Not mine")
    group = make_group(project, student)

    rv = client.get("/api/v1/students/projects", headers=auth(student))
    assert rv.status_code == 200
    body = rv.get_json()
    assert len(body) == 1
    assert body[0]["project_id"] == project.project_id
    assert body[0]["group_id"] == group.group_id
    assert body[0]["role"] == "Group Leader"
