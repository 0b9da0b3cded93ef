# controllers/dashboard_controller.py
from flask import Blueprint

from controllers.auth_helpers import auth_required
from extensions.database import db
from services.dashboard_service import DashboardService
from utils.response import json_response

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/summary")
@auth_required()
def summary():
    return json_response(data=DashboardService(db.session).summary())
