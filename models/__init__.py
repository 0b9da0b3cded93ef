# -*- coding: utf-8 -*-
"""
__init__.py
--------------------------------------------------------------------
汇总导入所有模型，使得：
- Flask-Migrate/Alembic 自动检测模型。
- 外部模块可简化引用：from models import Center, ProjectMember
注意：
- 避免循环导入：各模型仅在这里集中 import。
"""

from .mixins import TimestampMixin
from .role import Role
from .user import User
from .center import Center
from .staff import Staff
from .project import Project, ProjectMember

__all__ = [
    "TimestampMixin",
    "Role", "User", "Center", "Staff", "Project", "ProjectMember",
]
