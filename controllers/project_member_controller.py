# controllers/project_member_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin_or_manager
from extensions.database import db
from services.project_member_service import ProjectMemberService
from utils.pagination import parse_page_params
from utils.response import json_response

project_member_bp = Blueprint("project_members", __name__, url_prefix="/api/project-members")


@project_member_bp.get("")
@auth_required()
def list_members():
    """
    GET /api/project-members
      project_id, staff_id, status (active / completed)
      page, limit, sortBy, sortOrder
    """
    page = parse_page_params(request.args)
    return json_response(data=ProjectMemberService(db.session).list(request.args, page))


@project_member_bp.get("/<int:id>")
@auth_required()
def get_member(id: int):
    return json_response(data=ProjectMemberService(db.session).get(id))


@project_member_bp.post("")
@auth_required()
@require_admin_or_manager
def create_member():
    data = request.get_json(silent=True) or {}
    member = ProjectMemberService(db.session).create(data)
    return json_response(message="Project member added successfully", data=member, code=201)


@project_member_bp.put("/<int:id>")
@auth_required()
@require_admin_or_manager
def update_member(id: int):
    data = request.get_json(silent=True) or {}
    member = ProjectMemberService(db.session).update(id, data)
    return json_response(message="Project member updated successfully", data=member)


@project_member_bp.delete("/<int:id>")
@auth_required()
@require_admin_or_manager
def delete_member(id: int):
    ProjectMemberService(db.session).delete(id)
    return json_response(message="Project member removed successfully")


# 结束任职，end_time 缺省为当前时间
@project_member_bp.post("/<int:id>/complete")
@auth_required()
@require_admin_or_manager
def complete_member(id: int):
    data = request.get_json(silent=True) or {}
    member = ProjectMemberService(db.session).complete(id, data)
    return json_response(message="Project member marked as completed", data=member)


@project_member_bp.get("/<int:id>/stats")
@auth_required()
def member_stats(id: int):
    return json_response(data=ProjectMemberService(db.session).stats(id))
