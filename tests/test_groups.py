from __future__ import annotations
from datetime import timedelta

from extensions import db
from models import (
    AvailableAdminRole as R, AvailableStudentRole, Group, GroupMember, StudentDeliverable,
    StudentDeliverableSelection, utcnow,
)
from conftest import auth, make_admin, make_code, make_group, make_project, make_student


def _create(client, student, name="Team A", code="LEA-001"):
    return client.post("/api/v1/students/groups", json={"name": name, "security_code": code}, headers=auth(student))


def test_create_group_with_leader_code(client):
    project = make_project()
    make_code(project, code="LEA-001")
    student = make_student()

    rv = _create(client, student)
    assert rv.status_code == 201
    body = rv.get_json()
    assert body["role"] == "Group Leader" and body["project_id"] == project.project_id

    mine = client.get("/api/v1/students/groups", headers=auth(student)).get_json()["groups"]
    assert mine[0]["group"]["name"] == "Team A"
    assert mine[0]["project"]["project_id"] == project.project_id


def test_create_group_rules(client):
    project = make_project(max_groups=1)
    make_code(project, code="LEA-001")
    make_code(project, role=AvailableStudentRole.MEMBER, code="MEM-001")
    make_code(project, code="OLD-001", expires_in=timedelta(days=-1))
    first, second, third = make_student(), make_student(), make_student()

    assert _create(client, first, code="MEM-001").status_code == 400
    assert _create(client, first, code="OLD-001").status_code == 400
    assert _create(client, first).status_code == 201
    assert _create(client, first, name="Again").status_code == 409
    rv = _create(client, second, name="team a")
    assert rv.status_code == 409 and rv.get_json()["error"] == "Group already exists"
    assert _create(client, third, name="Team C").status_code == 400


def test_create_group_inactive_project(client):
    make_code(make_project(active=False), code="LEA-001")
    assert _create(client, make_student()).status_code == 400


def test_check_name_and_validate_code(client):
    project = make_project()
    make_code(project, code="LEA-001")
    make_code(project, role=AvailableStudentRole.MEMBER, code="MEM-001")
    student = make_student()
    make_group(project, student, name="Alpha")
    headers = auth(student)

    rv = client.post("/api/v1/students/groups/check-name", json={"project_id": project.project_id, "name": "alpha"},
                     headers=headers)
    assert rv.get_json() == {"exists": True}

    rv = client.post("/api/v1/students/groups/validate-code", json={"security_code": "LEA-001"}, headers=headers)
    assert rv.get_json()["is_valid"] is True
    rv = client.post("/api/v1/students/groups/validate-code", json={"security_code": "MEM-001"}, headers=headers)
    body = rv.get_json()
    assert body["is_valid"] is False and body["role"] == "Member"
    rv = client.post("/api/v1/students/groups/validate-code", json={"security_code": "XXX-000"}, headers=headers)
    assert rv.get_json()["message"] == "Invalid security code"


def test_members_lifecycle(client):
    project = make_project(max_group_size=2)
    leader, mate, extra = make_student(), make_student(), make_student()
    group = make_group(project, leader)
    url = f"/api/v1/students/groups/{group.group_id}/members"

    rv = client.post(url, json={"email": mate.email}, headers=auth(leader))
    assert rv.status_code == 201 and rv.get_json()["role"] == "Member"
    assert client.post(url, json={"email": extra.email}, headers=auth(mate)).status_code == 403
    rv = client.post(url, json={"email": extra.email}, headers=auth(leader))
    assert rv.status_code == 400
    assert "maximum size of 2" in rv.get_json()["error"]

    members = client.get(url, headers=auth(mate)).get_json()["members"]
    assert {m["student_id"] for m in members} == {leader.student_id, mate.student_id}
    assert client.get(url, headers=auth(extra)).status_code == 403

    rv = client.delete(url, json={"student_id": leader.student_id}, headers=auth(leader))
    assert rv.status_code == 400
    assert client.delete(url, json={"student_id": mate.student_id}, headers=auth(leader)).status_code == 204


def test_add_member_rules(client):
    project = make_project()
    leader = make_student()
    pending = make_student(pending=True)
    busy = make_student()
    group = make_group(project, leader)
    make_group(project, busy, name="Other")
    url = f"/api/v1/students/groups/{group.group_id}/members"
    headers = auth(leader)

    assert client.post(url, json={"email": "ghost@studenti.unitn.it"}, headers=headers).status_code == 404
    assert client.post(url, json={"email": pending.email}, headers=headers).status_code == 400
    assert client.post(url, json={"email": busy.email}, headers=headers).status_code == 409


def test_removing_member_drops_their_selections(client):
    project = make_project()
    leader, mate = make_student(), make_student()
    group = make_group(project, leader, members=[mate])
    deliverable = StudentDeliverable(project_id=project.project_id, name="Report")
    db.session.add(deliverable)
    db.session.flush()
    db.session.add(StudentDeliverableSelection(student_id=mate.student_id,
                                               student_deliverable_id=deliverable.student_deliverable_id))
    db.session.commit()

    rv = client.delete(f"/api/v1/students/groups/{group.group_id}/members", json={"student_id": mate.student_id},
                       headers=auth(leader))
    assert rv.status_code == 204
    assert db.session.query(StudentDeliverableSelection).filter_by(student_id=mate.student_id).count() == 0


def test_rename_and_delete_group(client):
    project = make_project()
    leader, mate = make_student(), make_student()
    group = make_group(project, leader, members=[mate])
    make_group(project, make_student(), name="Taken")
    url = f"/api/v1/students/groups/{group.group_id}"

    assert client.patch(url, json={"name": "New"}, headers=auth(mate)).status_code == 403
    assert client.patch(url, json={"name": "taken"}, headers=auth(leader)).status_code == 409
    rv = client.patch(url, json={"name": "New"}, headers=auth(leader))
    assert rv.status_code == 200 and rv.get_json()["name"] == "New"

    gid = group.group_id
    assert client.delete(url, headers=auth(leader)).status_code == 204
    db.session.expunge_all()
    assert db.session.get(Group, gid) is None
    assert db.session.query(GroupMember).filter_by(group_id=gid).count() == 0


# ---------- админы ----------
def test_admin_overview_and_details(client):
    project = make_project(deliverable_selection_deadline=utcnow() - timedelta(days=1))
    leader = make_student()
    group = make_group(project, leader, members=[make_student()])
    headers = auth(make_admin(R.TUTOR))

    rv = client.get(f"/api/v1/admins/groups/projects/{project.project_id}", headers=headers)
    item = rv.get_json()["groups"][0]
    assert item["member_count"] == 2
    assert item["group_leader"]["student_id"] == leader.student_id
    assert item["deliverable_selected"] is None
    assert item["time_expired"] is True

    rv = client.get(f"/api/v1/admins/groups/{group.group_id}", headers=headers)
    body = rv.get_json()
    assert body["project_name"] == project.name
    assert len(body["members"]) == 2
    assert body["deliverable_selection"] is None


def test_admin_member_management(client):
    project = make_project(max_group_size=3)
    leader, mate, newbie = make_student(), make_student(), make_student()
    group = make_group(project, leader, members=[mate])
    headers = auth(make_admin(R.PROFESSOR))
    base = f"/api/v1/admins/groups/{group.group_id}"

    rv = client.post(f"{base}/members", json={"student_email": newbie.email, "role_id": 1}, headers=headers)
    assert rv.status_code == 409
    rv = client.post(f"{base}/members", json={"student_email": newbie.email}, headers=headers)
    assert rv.status_code == 201 and rv.get_json()["success"] is True

    rv = client.patch(f"{base}/leader", json={"new_leader_student_id": mate.student_id}, headers=headers)
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["old_leader"]["status"] == "demoted_to_member"
    assert body["new_leader"]["status"] == "promoted_to_leader"

    rv = client.patch(f"{base}/leader", json={"new_leader_student_id": newbie.student_id, "remove_old_leader": True},
                      headers=headers)
    assert rv.get_json()["old_leader"]["status"] == "removed_from_group"
    db.session.expire_all()
    assert {m.student_id for m in db.session.get(Group, group.group_id).members} == {leader.student_id,
                                                                                      newbie.student_id}

    assert client.delete(f"{base}/members/{newbie.student_id}", headers=headers).status_code == 204
    assert client.delete(f"{base}/members/{newbie.student_id}", headers=headers).status_code == 404


def test_tutor_cannot_modify_groups(client):
    project = make_project()
    group = make_group(project, make_student())
    rv = client.post(f"/api/v1/admins/groups/{group.group_id}/members", json={"student_email": "x@y"},
                     headers=auth(make_admin(R.TUTOR)))
    assert rv.status_code == 403
