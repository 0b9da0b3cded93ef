# -*- coding: utf-8 -*-
"""
center.py
--------------------------------------------------------------------
培训中心：
- field 为中心所属领域（分类），用于列表筛选。
- 删除中心时数据库会级联删除项目、将员工 center_id 置空；
  服务层要求中心下没有员工和项目才允许删除。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class Center(TimestampMixin, db.Model):
    __tablename__ = "centers"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    field = db.Column(db.String(255), nullable=False, index=True)
    address = db.Column(db.Text, nullable=False)

    projects = db.relationship("Project", back_populates="center", passive_deletes=True)
    staff = db.relationship("Staff", back_populates="center", passive_deletes=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "field": self.field,
            "address": self.address,
            **self.timestamps_dict(),
        }
