from __future__ import annotations

from enum import Enum


class RoleName(str, Enum):
    """
    系统内置角色：
    - admin 拥有全部权限，跳过资源归属校验
    - manager 可维护中心/项目/员工/成员关系，归属校验视为全局放行
    - staff / member 只读，且详情受归属校验约束
    """

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    MEMBER = "member"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]


# 启动时确保存在的角色
DEFAULT_ROLES: list[str] = RoleName.values()


def normalize_role(raw: RoleName | str | None) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, RoleName):
        return raw.value
    value = raw.strip().lower()
    return value or None
