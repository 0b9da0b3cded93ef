# controllers/staff_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin_or_manager, require_ownership
from extensions.database import db
from services.staff_service import StaffService
from utils.pagination import parse_page_params
from utils.response import json_response

staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("")
@auth_required()
def list_staff():
    page = parse_page_params(request.args)
    data = StaffService(db.session).list(request.args, page)
    return json_response(data=data)


@staff_bp.get("/<int:id>")
@auth_required()
@require_ownership("staff")
def get_staff(id: int):
    return json_response(data=StaffService(db.session).get(id))


@staff_bp.post("")
@auth_required()
@require_admin_or_manager
def create_staff():
    data = request.get_json(silent=True) or {}
    staff = StaffService(db.session).create(data)
    return json_response(message="Staff member created successfully", data=staff, code=201)


@staff_bp.put("/<int:id>")
@auth_required()
@require_admin_or_manager
def update_staff(id: int):
    data = request.get_json(silent=True) or {}
    staff = StaffService(db.session).update(id, data)
    return json_response(message="Staff member updated successfully", data=staff)


@staff_bp.delete("/<int:id>")
@auth_required()
@require_admin_or_manager
def delete_staff(id: int):
    StaffService(db.session).delete(id)
    return json_response(message="Staff member deleted successfully")


@staff_bp.get("/<int:id>/stats")
@auth_required()
@require_ownership("staff")
def staff_stats(id: int):
    return json_response(data=StaffService(db.session).stats(id))
