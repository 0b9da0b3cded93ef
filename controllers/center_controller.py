# controllers/center_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin_or_manager, require_ownership
from extensions.database import db
from services.center_service import CenterService
from utils.pagination import parse_page_params
from utils.response import json_response

center_bp = Blueprint("center", __name__, url_prefix="/api/centers")


# 中心列表（登录即可）
@center_bp.get("")
@auth_required()
def list_centers():
    page = parse_page_params(request.args)
    data = CenterService(db.session).list(request.args, page)
    return json_response(data=data)


# 中心详情（含员工、项目）
@center_bp.get("/<int:id>")
@auth_required()
@require_ownership("center")
def get_center(id: int):
    return json_response(data=CenterService(db.session).get(id))


@center_bp.post("")
@auth_required()
@require_admin_or_manager
def create_center():
    data = request.get_json(silent=True) or {}
    center = CenterService(db.session).create(data)
    return json_response(message="Center created successfully", data=center, code=201)


@center_bp.put("/<int:id>")
@auth_required()
@require_admin_or_manager
def update_center(id: int):
    data = request.get_json(silent=True) or {}
    center = CenterService(db.session).update(id, data)
    return json_response(message="Center updated successfully", data=center)


@center_bp.delete("/<int:id>")
@auth_required()
@require_admin_or_manager
def delete_center(id: int):
    CenterService(db.session).delete(id)
    return json_response(message="Center deleted successfully")


@center_bp.get("/<int:id>/stats")
@auth_required()
@require_ownership("center")
def center_stats(id: int):
    return json_response(data=CenterService(db.session).stats(id))
