# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
用户实体。
说明：
- name 即登录用户名，全局唯一。
- status 控制账号状态，只有 active 可以登录/调用接口。
- 与员工档案(Staff)没有外键，按 name 相等关联。
"""

from extensions.database import db
from constants.statuses import UserStatus
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class User(TimestampMixin, db.Model):
    __tablename__ = "users"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column("password", db.String(255), nullable=False)
    status = db.Column(
        db.Enum(*[s.value for s in UserStatus], name="user_status", native_enum=False),
        nullable=False,
        default=UserStatus.ACTIVE.value,
        server_default=UserStatus.ACTIVE.value,
    )
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="SET NULL"), index=True)

    role = db.relationship("Role", back_populates="users")

    def __repr__(self):
        return f"<User id={self.id} name={self.name} status={self.status}>"

    @property
    def role_name(self):
        return self.role.name if self.role else None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    def to_dict(self):
        # 不输出 password
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "role_id": self.role_id,
            "role_name": self.role_name,
            **self.timestamps_dict(),
        }
