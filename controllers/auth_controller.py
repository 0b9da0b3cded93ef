# controllers/auth_controller.py
from flask import Blueprint, g, request

from controllers.auth_helpers import auth_required
from extensions.database import db
from services.auth_service import AuthService
from utils.response import json_response

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    result = AuthService(db.session).login(data)
    return json_response(message="Login successful", data=result)


# 公开注册
@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    result = AuthService(db.session).register(data)
    return json_response(message="User registered successfully", data=result, code=201)


# 无状态 token，客户端丢弃即可
@auth_bp.post("/logout")
@auth_required()
def logout():
    return json_response(message="Logout successful")


@auth_bp.get("/me")
@auth_required()
def me():
    return json_response(data=AuthService(db.session).me(g.current_user))


@auth_bp.post("/change-password")
@auth_required()
def change_password():
    data = request.get_json(silent=True) or {}
    AuthService(db.session).change_password(g.current_user.id, data)
    return json_response(message="Password changed successfully")
