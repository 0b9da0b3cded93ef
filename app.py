# app.py
import logging
import traceback

from flask import Flask, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config.settings import get_config
from extensions.database import db, migrate
from extensions.logger import init_logger
import models  # noqa: F401  注册全部模型，供 create_all / Flask-Migrate 使用
from controllers.auth_controller import auth_bp
from controllers.user_controller import user_bp
from controllers.role_controller import role_bp
from controllers.center_controller import center_bp
from controllers.project_controller import project_bp
from controllers.staff_controller import staff_bp
from controllers.project_member_controller import project_member_bp
from controllers.dashboard_controller import dashboard_bp
from services.auth_service import AuthService
from utils.datetime_helpers import datetime_to_iso, utcnow
from utils.exceptions import BizError
from utils.response import json_response

logger = logging.getLogger(__name__)


def _bootstrap(app):
    """建表 + 默认角色 + 默认管理员"""
    with app.app_context():
        try:
            db.create_all()
            AuthService(db.session).ensure_default_roles_and_admin(
                app.config["ADMIN_INIT_USERNAME"],
                app.config["ADMIN_INIT_PASSWORD"],
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning("Database bootstrap skipped: %s", e)


def create_app(config_name="development"):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    init_logger(app)
    logger.info("Database URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    if app.config.get("AUTO_CREATE_TABLES"):
        _bootstrap(app)

    # 登录 / 注册
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    # 用户管理（admin）
    app.register_blueprint(user_bp, url_prefix="/api/users")
    # 角色管理（admin）
    app.register_blueprint(role_bp)
    # 中心 / 项目 / 员工
    app.register_blueprint(center_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(staff_bp)
    # 项目成员
    app.register_blueprint(project_member_bp)
    # 首页汇总
    app.register_blueprint(dashboard_bp)

    @app.get("/health")
    def health():
        return jsonify({
            "status": "OK",
            "message": "MS System API is running",
            "timestamp": datetime_to_iso(utcnow()),
            "environment": app.config.get("APP_ENV"),
        })

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return json_response(message=f"Route {request.path} not found", code=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return json_response(message=f"Method {request.method} not allowed for {request.path}", code=405)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return json_response(code=e.code, message=e.message, errors=e.errors)

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return json_response(code=e.code or 500, message=e.description)
        db.session.rollback()
        logger.exception("UNHANDLED EXCEPTION")
        extra = {}
        if app.config.get("APP_ENV") != "production":
            extra["stack"] = traceback.format_exc()
        return json_response(code=500, message="Internal server error", **extra)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=True)
