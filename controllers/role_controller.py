# controllers/role_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin
from extensions.database import db
from services.role_service import RoleService
from utils.pagination import parse_page_params
from utils.response import json_response

role_bp = Blueprint("roles", __name__, url_prefix="/api/roles")


@role_bp.get("")
@auth_required()
@require_admin
def list_roles():
    page = parse_page_params(request.args)
    return json_response(data=RoleService(db.session).list(request.args, page))


@role_bp.get("/<int:id>")
@auth_required()
@require_admin
def get_role(id: int):
    return json_response(data=RoleService(db.session).get(id))


@role_bp.post("")
@auth_required()
@require_admin
def create_role():
    data = request.get_json(silent=True) or {}
    role = RoleService(db.session).create(data)
    return json_response(message="Role created successfully", data=role, code=201)


@role_bp.put("/<int:id>")
@auth_required()
@require_admin
def update_role(id: int):
    data = request.get_json(silent=True) or {}
    role = RoleService(db.session).update(id, data)
    return json_response(message="Role updated successfully", data=role)


@role_bp.delete("/<int:id>")
@auth_required()
@require_admin
def delete_role(id: int):
    RoleService(db.session).delete(id)
    return json_response(message="Role deleted successfully")


@role_bp.get("/<int:id>/stats")
@auth_required()
@require_admin
def role_stats(id: int):
    return json_response(data=RoleService(db.session).stats(id))
