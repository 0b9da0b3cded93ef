# -*- coding: utf-8 -*-
"""
role.py
--------------------------------------------------------------------
角色实体：
- 由管理员维护，默认 admin / manager / staff / member。
- 被 User.role_id 引用；删除角色时数据库将用户的 role_id 置空，
  服务层在仍有用户引用时拒绝删除。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class Role(TimestampMixin, db.Model):
    __tablename__ = "roles"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)

    users = db.relationship("User", back_populates="role", passive_deletes=True)

    def __repr__(self):
        return f"<Role id={self.id} name={self.name}>"

    def to_dict(self):
        return {"id": self.id, "name": self.name, **self.timestamps_dict()}
