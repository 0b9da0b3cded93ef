# -*- coding: utf-8 -*-
"""
staff.py
--------------------------------------------------------------------
员工档案：
- phone 全局唯一。
- center_id 可空，中心删除时置空。
- 与 User 按 name 相等关联（登录时据此带出员工档案）。
"""

from extensions.database import db
from constants.statuses import Gender
from utils.datetime_helpers import date_to_iso
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class Staff(TimestampMixin, db.Model):
    __tablename__ = "staff"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    birth_date = db.Column(db.Date)
    gender = db.Column(
        db.Enum(*[g.value for g in Gender], name="staff_gender", native_enum=False),
        nullable=False,
    )
    phone = db.Column(db.String(20), nullable=False, unique=True)
    address = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text)
    center_id = db.Column(db.Integer, db.ForeignKey("centers.id", ondelete="SET NULL"), index=True)

    center = db.relationship("Center", back_populates="staff")
    memberships = db.relationship("ProjectMember", back_populates="staff", passive_deletes=True)

    def to_dict(self, with_center: bool = True):
        data = {
            "id": self.id,
            "name": self.name,
            "birth_date": date_to_iso(self.birth_date),
            "gender": self.gender,
            "phone": self.phone,
            "address": self.address,
            "description": self.description,
            "center_id": self.center_id,
            **self.timestamps_dict(),
        }
        if with_center:
            data["center_name"] = self.center.name if self.center else None
            data["center_field"] = self.center.field if self.center else None
        return data
