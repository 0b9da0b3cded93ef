from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import g
from sqlalchemy import select
from sqlalchemy.orm import Session

from constants.roles import RoleName, normalize_role
from models.center import Center
from models.project import Project
from models.staff import Staff
from utils.exceptions import Unauthenticated


@dataclass
class Principal:
    """
    当前请求的调用者，由 auth_required 在每次请求时从数据库重新构建。
    role 来自 roles 表，不信任 token 中的 role 字段。
    """
    id: int
    name: str
    status: str
    role: Optional[str]
    role_id: Optional[int]

    def has_role(self, *roles: RoleName | str) -> bool:
        normalized = {normalize_role(r) for r in roles if r}
        return self.role in normalized

    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value


def get_current_principal() -> Principal:
    principal = getattr(g, "current_user", None)
    if principal is None:
        raise Unauthenticated()
    return principal


def _center_stmt(resource_id: int, name: str):
    return (
        select(Center.id)
        .join(Staff, Staff.center_id == Center.id)
        .where(Center.id == resource_id, Staff.name == name)
    )


def _project_stmt(resource_id: int, name: str):
    return (
        select(Project.id)
        .join(Center, Center.id == Project.center_id)
        .join(Staff, Staff.center_id == Center.id)
        .where(Project.id == resource_id, Staff.name == name)
    )


def _staff_stmt(resource_id: int, name: str):
    return select(Staff.id).where(Staff.id == resource_id, Staff.name == name)


OWNERSHIP_QUERIES = {
    "center": _center_stmt,
    "project": _project_stmt,
    "staff": _staff_stmt,
}


def can_access_resource(session: Session, resource_type: str, resource_id, principal: Principal) -> bool:
    """
    资源归属校验：
      - admin 直接放行
      - 未知资源类型或缺少 id：放行
      - 否则查询归属关系；查不到时只有 manager 仍可访问
    """
    if principal.is_admin():
        return True
    builder = OWNERSHIP_QUERIES.get(resource_type)
    if builder is None or resource_id in (None, ""):
        return True
    try:
        rid = int(resource_id)
    except (TypeError, ValueError):
        return True
    owned = session.execute(builder(rid, principal.name).limit(1)).first() is not None
    return owned or principal.role == RoleName.MANAGER.value
