from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import MANAGER_ROLES, admin_required, current_account, student_required
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from blueprints.projects.services import ensure_project_access
from . import api_bp, services as svc
from .schemas import (
    AddMemberIn, AdminAddMemberIn, CheckNameIn, CreateGroupIn, CreateGroupOut, GroupDetailsOut,
    GroupMembersOut, GroupOut, GroupWithProjectOut, MemberOut, ProjectGroupOut, RemoveMemberIn,
    RenameGroupIn, TransferLeadershipIn, TransferLeadershipOut, ValidateCodeIn, ValidateCodeOut,
)


def _member_out(member) -> dict:
    return dump(MemberOut, {
        "student_id": member.student_id,
        "first_name": member.student.first_name,
        "last_name": member.student.last_name,
        "email": member.student.email,
        "role_id": member.student_role_id,
        "role": member.role.name,
    })


# ---------- студенты ----------
@api_bp.post("/students/groups")
@student_required
def groups_create():
    data = parse_body(CreateGroupIn)
    group = svc.create_group(current_account(), name=data.name, security_code=data.security_code)
    return created(dump(CreateGroupOut, {
        "group_id": group.group_id, "name": group.name,
        "project_id": group.project_id, "role": "Group Leader",
    }))


@api_bp.get("/students/groups")
@student_required
def groups_mine():
    rows = svc.student_groups(current_account())
    return jsonify({"groups": [
        dump(GroupWithProjectOut, {
            "group": GroupOut.model_validate(group),
            "project": {"project_id": project.project_id, "name": project.name, "year": project.year},
            "role": member.role.name,
        })
        for group, project, member in rows
    ]})


@api_bp.post("/students/groups/check-name")
@student_required
def groups_check_name():
    data = parse_body(CheckNameIn)
    return jsonify({"exists": svc.name_exists(data.project_id, data.name)})


@api_bp.post("/students/groups/validate-code")
@student_required
def groups_validate_code():
    data = parse_body(ValidateCodeIn)
    result = svc.validate_leader_code(data.security_code)
    project = result.get("project")
    if project is not None:
        result["project"] = {"project_id": project.project_id, "name": project.name, "year": project.year}
    return jsonify(dump(ValidateCodeOut, result))


@api_bp.patch("/students/groups/<int:group_id>")
@student_required
def groups_rename(group_id: int):
    data = parse_body(RenameGroupIn)
    group = svc.rename_group(current_account(), group_id, data.name)
    return jsonify(dump(GroupOut, group))


@api_bp.delete("/students/groups/<int:group_id>")
@student_required
def groups_delete(group_id: int):
    svc.delete_group(current_account(), group_id)
    return no_content()


@api_bp.get("/students/groups/<int:group_id>/members")
@student_required
def groups_members(group_id: int):
    group = svc.get_group(group_id)
    svc.require_member(group, current_account())
    return jsonify(dump(GroupMembersOut, {
        "group_id": group.group_id,
        "group_name": group.name,
        "members": svc.member_rows(group),
    }))


@api_bp.post("/students/groups/<int:group_id>/members")
@student_required
def groups_add_member(group_id: int):
    group = svc.get_group(group_id)
    svc.require_leader(group, current_account())
    data = parse_body(AddMemberIn)
    return created(_member_out(svc.add_member(group, data.email)))


@api_bp.delete("/students/groups/<int:group_id>/members")
@student_required
def groups_remove_member(group_id: int):
    group = svc.get_group(group_id)
    svc.require_leader(group, current_account())
    data = parse_body(RemoveMemberIn)
    svc.remove_member(group, data.student_id)
    return no_content()


# ---------- админы ----------
@api_bp.get("/admins/groups/projects/<int:project_id>")
@admin_required
def admin_project_groups(project_id: int):
    project = ensure_project_access(current_account(), project_id)
    return jsonify({"groups": dump_many(ProjectGroupOut, svc.project_groups_overview(project))})


@api_bp.get("/admins/groups/<int:group_id>")
@admin_required
def admin_group_details(group_id: int):
    group = svc.get_group(group_id)
    ensure_project_access(current_account(), group.project_id)
    return jsonify(dump(GroupDetailsOut, svc.group_details(group)))


@api_bp.post("/admins/groups/<int:group_id>/members")
@admin_required(*MANAGER_ROLES)
def admin_add_member(group_id: int):
    group = svc.get_group(group_id)
    ensure_project_access(current_account(), group.project_id)
    data = parse_body(AdminAddMemberIn)
    member = svc.add_member(group, data.student_email, data.role_id)
    return created({"success": True, "message": "Member added successfully", "member": _member_out(member)})


@api_bp.delete("/admins/groups/<int:group_id>/members/<int:student_id>")
@admin_required(*MANAGER_ROLES)
def admin_remove_member(group_id: int, student_id: int):
    group = svc.get_group(group_id)
    ensure_project_access(current_account(), group.project_id)
    svc.remove_member(group, student_id, allow_leader=True)
    return no_content()


@api_bp.patch("/admins/groups/<int:group_id>/leader")
@admin_required(*MANAGER_ROLES)
def admin_transfer_leadership(group_id: int):
    group = svc.get_group(group_id)
    ensure_project_access(current_account(), group.project_id)
    data = parse_body(TransferLeadershipIn)
    result = svc.transfer_leadership(group, data.new_leader_student_id, data.remove_old_leader)
    return jsonify(dump(TransferLeadershipOut, result))
