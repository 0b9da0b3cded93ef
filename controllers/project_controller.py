# controllers/project_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, require_admin_or_manager, require_ownership
from extensions.database import db
from services.project_service import ProjectService
from utils.pagination import parse_page_params
from utils.response import json_response

project_bp = Blueprint("project", __name__, url_prefix="/api/projects")


@project_bp.get("")
@auth_required()
def list_projects():
    page = parse_page_params(request.args)
    data = ProjectService(db.session).list(request.args, page)
    return json_response(message="Fetched projects successfully", data=data)


@project_bp.get("/<int:id>")
@auth_required()
@require_ownership("project")
def get_project(id: int):
    return json_response(data=ProjectService(db.session).get(id))


@project_bp.post("")
@auth_required()
@require_admin_or_manager
def create_project():
    data = request.get_json(silent=True) or {}
    project = ProjectService(db.session).create(data)
    return json_response(message="Project created successfully", data=project, code=201)


@project_bp.put("/<int:id>")
@auth_required()
@require_admin_or_manager
def update_project(id: int):
    data = request.get_json(silent=True) or {}
    project = ProjectService(db.session).update(id, data)
    return json_response(message="Project updated successfully", data=project)


@project_bp.delete("/<int:id>")
@auth_required()
@require_admin_or_manager
def delete_project(id: int):
    ProjectService(db.session).delete(id)
    return json_response(message="Project deleted successfully")


@project_bp.get("/<int:id>/stats")
@auth_required()
@require_ownership("project")
def project_stats(id: int):
    return json_response(data=ProjectService(db.session).stats(id))
