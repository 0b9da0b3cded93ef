# controllers/user_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin
from extensions.database import db
from services.user_service import UserService
from utils.pagination import parse_page_params
from utils.response import json_response

user_bp = Blueprint("users", __name__)


@user_bp.get("")
@auth_required()
@require_admin
def list_users():
    """
    GET /api/users
      page, limit
      search (按 name 模糊)
      status, role_id
      sortBy, sortOrder
    """
    page = parse_page_params(request.args)
    return json_response(data=UserService(db.session).list(request.args, page))


@user_bp.get("/<int:id>")
@auth_required()
@require_admin
def get_user(id: int):
    return json_response(data=UserService(db.session).get(id))


@user_bp.post("")
@auth_required()
@require_admin
def create_user():
    data = request.get_json(silent=True) or {}
    user = UserService(db.session).create(data)
    return json_response(message="User created successfully", data=user, code=201)


@user_bp.put("/<int:id>")
@auth_required()
@require_admin
def update_user(id: int):
    data = request.get_json(silent=True) or {}
    user = UserService(db.session).update(id, data)
    return json_response(message="User updated successfully", data=user)


@user_bp.delete("/<int:id>")
@auth_required()
@require_admin
def delete_user(id: int):
    UserService(db.session).delete(id)
    return json_response(message="User deleted successfully")


@user_bp.get("/<int:id>/stats")
@auth_required()
@require_admin
def user_stats(id: int):
    return json_response(data=UserService(db.session).stats(id))
