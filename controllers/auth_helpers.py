# controllers/auth_helpers.py
from __future__ import annotations

from functools import wraps

from flask import g, request

from constants.roles import RoleName, normalize_role
from extensions.database import db
from services.auth_service import AuthService
from utils.exceptions import Forbidden
from utils.permissions import Principal, can_access_resource, get_current_principal
from utils.response import json_response


def _extract_bearer(auth_header: str | None) -> str | None:
    if not auth_header:
        return None
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


def auth_required():
    """
    鉴权装饰器：
      - 验证 Authorization: Bearer <token>
      - 每次请求都从数据库重新读取用户，构建 Principal 注入 g.current_user
      - token 无效/过期/用户不存在/未激活时由 AuthService 抛出 401 业务异常
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.current_user = None
            token = _extract_bearer(request.headers.get("Authorization"))
            if not token:
                return json_response(code=401, message="Access token is required")
            g.current_user = AuthService(db.session).authenticate(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_roles(*roles: RoleName | str):
    """
    角色校验，依赖 @auth_required 预先注入的 g.current_user。
    """
    allowed = {normalize_role(role) for role in roles if role}
    if not allowed:
        raise ValueError("require_roles needs at least one role")

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal: Principal | None = getattr(g, "current_user", None)
            if principal is None:
                return json_response(code=401, message="Authentication required")
            if not principal.has_role(*allowed):
                return json_response(code=403, message="Insufficient permissions")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


require_admin = require_roles(RoleName.ADMIN)
require_admin_or_manager = require_roles(RoleName.ADMIN, RoleName.MANAGER)


def require_ownership(resource_type: str, id_arg: str = "id"):
    """
    资源归属校验（center / project / staff）。
    admin 跳过；manager 即使不归属也放行；其他角色不归属返回 403。
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = get_current_principal()
            resource_id = kwargs.get(id_arg)
            if resource_id is None:
                view_args = getattr(request, "view_args", {}) or {}
                resource_id = view_args.get(id_arg)
            if not can_access_resource(db.session, resource_type, resource_id, principal):
                raise Forbidden("Access denied to this resource")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
