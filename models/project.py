# -*- coding: utf-8 -*-
"""
project.py
--------------------------------------------------------------------
项目实体及成员：
- Project: 中心下的一个项目，名称在中心内唯一。
- ProjectMember: 员工在项目中的一段任职 [start_time, end_time)，
  end_time 为空表示仍在进行中。
约束：
- (project_id, staff_id) 唯一。
- 同一员工的任职时间段不得重叠，由服务层检查（见 ProjectMemberService）。
"""

from extensions.database import db
from constants.statuses import ProjectStatus
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class Project(TimestampMixin, db.Model):
    __tablename__ = "projects"
    __table_args__ = (
        db.UniqueConstraint("center_id", "name", name="uq_project_center_name"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    center_id = db.Column(
        db.Integer, db.ForeignKey("centers.id", ondelete="CASCADE"), index=True
    )
    project_status = db.Column(
        db.Enum(*[s.value for s in ProjectStatus], name="project_status", native_enum=False),
        nullable=False,
        default=ProjectStatus.PLANNING.value,
        server_default=ProjectStatus.PLANNING.value,
    )

    center = db.relationship("Center", back_populates="projects")
    members = db.relationship("ProjectMember", back_populates="project", passive_deletes=True)

    def to_dict(self, with_center: bool = True):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "center_id": self.center_id,
            "project_status": self.project_status,
            **self.timestamps_dict(),
        }
        if with_center:
            data["center_name"] = self.center.name if self.center else None
            data["center_field"] = self.center.field if self.center else None
        return data


class ProjectMember(TimestampMixin, db.Model):
    __tablename__ = "project_members"
    __table_args__ = (
        db.UniqueConstraint("project_id", "staff_id", name="unique_project_staff"),
        COMMON_TABLE_ARGS,
    )
    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    staff_id = db.Column(
        db.Integer, db.ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime)

    project = db.relationship("Project", back_populates="members")
    staff = db.relationship("Staff", back_populates="memberships")

