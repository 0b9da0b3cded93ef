# repositories/project_member_repository.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, case, func, or_, select

from constants.sort_fields import MemberSortField
from constants.statuses import MembershipStatus
from models.center import Center
from models.project import Project, ProjectMember
from models.staff import Staff
from models.user import User
from repositories.base import BaseRepository
from utils.datetime_helpers import datetime_to_iso
from utils.pagination import PageParams

_membership_status = case(
    (ProjectMember.end_time.is_(None), MembershipStatus.ACTIVE.value),
    else_=MembershipStatus.COMPLETED.value,
).label("membership_status")


def _detail_select():
    """成员行 + 项目/中心/员工/用户信息（全部 LEFT JOIN）"""
    return (
        select(
            ProjectMember.id,
            ProjectMember.project_id,
            ProjectMember.staff_id,
            ProjectMember.start_time,
            ProjectMember.end_time,
            ProjectMember.created_at,
            ProjectMember.updated_at,
            Project.name.label("project_name"),
            Project.description.label("project_description"),
            Project.project_status,
            Center.name.label("center_name"),
            Center.field.label("center_field"),
            Staff.gender,
            Staff.phone,
            Staff.address,
            Staff.name.label("staff_name"),
            User.status.label("user_status"),
            _membership_status,
        )
        .select_from(ProjectMember)
        .outerjoin(Project, Project.id == ProjectMember.project_id)
        .outerjoin(Center, Center.id == Project.center_id)
        .outerjoin(Staff, Staff.id == ProjectMember.staff_id)
        .outerjoin(User, User.name == Staff.name)
    )


def member_row_to_dict(row) -> dict:
    data = dict(row._mapping)
    for key in ("start_time", "end_time", "created_at", "updated_at"):
        if key in data:
            data[key] = datetime_to_iso(data[key])
    return data


class ProjectMemberRepository(BaseRepository):

    def get_by_id(self, member_id: int) -> Optional[ProjectMember]:
        return self.session.get(ProjectMember, member_id)

    def get_detail(self, member_id: int) -> Optional[dict]:
        row = self.session.execute(
            _detail_select().where(ProjectMember.id == member_id)
        ).first()
        return member_row_to_dict(row) if row else None

    def create(self, project_id: int, staff_id: int, start_time: datetime,
               end_time: Optional[datetime]) -> ProjectMember:
        member = ProjectMember(
            project_id=project_id,
            staff_id=staff_id,
            start_time=start_time,
            end_time=end_time,
        )
        return self.add(member)

    def update(self, member: ProjectMember, project_id: int, staff_id: int,
               start_time: datetime, end_time: Optional[datetime]) -> ProjectMember:
        member.project_id = project_id
        member.staff_id = staff_id
        member.start_time = start_time
        member.end_time = end_time
        self.session.flush()
        return member

    def set_end_time(self, member: ProjectMember, end_time: datetime) -> ProjectMember:
        member.end_time = end_time
        self.session.flush()
        return member

    # ---------- 业务校验查询 ----------
    def pair_exists(self, project_id: int, staff_id: int, exclude_id: Optional[int] = None) -> bool:
        stmt = select(ProjectMember.id).where(
            ProjectMember.project_id == project_id,
            ProjectMember.staff_id == staff_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(ProjectMember.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def has_overlap(self, staff_id: int, start_time: datetime, end_time: Optional[datetime],
                    exclude_id: Optional[int] = None) -> bool:
        """
        同一员工是否存在与 [start_time, end_time) 冲突的任职。
        新区间未结束时，探测终点取 start_time 本身。
        """
        probe_end = end_time or start_time
        stmt = select(ProjectMember.id).where(
            ProjectMember.staff_id == staff_id,
            or_(
                and_(
                    ProjectMember.start_time <= start_time,
                    or_(ProjectMember.end_time.is_(None), ProjectMember.end_time > start_time),
                ),
                and_(ProjectMember.start_time < probe_end, ProjectMember.end_time > probe_end),
                and_(ProjectMember.start_time >= start_time, ProjectMember.start_time < probe_end),
            ),
        )
        if exclude_id is not None:
            stmt = stmt.where(ProjectMember.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    # ---------- 列表 ----------
    def list(self, project_id: Optional[int], staff_id: Optional[int], status: Optional[str],
             sort_field: MemberSortField, descending: bool,
             page: PageParams) -> Tuple[List[dict], int]:
        stmt = _detail_select()
        if project_id:
            stmt = stmt.where(ProjectMember.project_id == project_id)
        if staff_id:
            stmt = stmt.where(ProjectMember.staff_id == staff_id)
        if status == MembershipStatus.ACTIVE.value:
            stmt = stmt.where(ProjectMember.end_time.is_(None))
        elif status == MembershipStatus.COMPLETED.value:
            stmt = stmt.where(ProjectMember.end_time.isnot(None))
        col = getattr(ProjectMember, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), ProjectMember.id.desc())
        rows, total = self.paginate(stmt, page)
        return [member_row_to_dict(r) for r in rows], total

    def project_facets(self) -> List[dict]:
        rows = self.session.execute(
            select(Project.id, Project.name, Project.description).order_by(Project.name)
        ).all()
        return [{"id": pid, "name": name, "description": desc} for pid, name, desc in rows]

    def staff_facets(self) -> List[dict]:
        rows = self.session.execute(select(Staff.id, Staff.name).order_by(Staff.name)).all()
        return [{"id": sid, "staff_name": name} for sid, name in rows]

    # ---------- 按项目 / 员工取成员 ----------
    def members_of_project(self, project_id: int) -> List[dict]:
        stmt = (
            select(
                ProjectMember.id,
                ProjectMember.start_time,
                ProjectMember.end_time,
                ProjectMember.created_at,
                Staff.id.label("staff_id"),
                Staff.name.label("staff_name"),
                Staff.gender,
                Staff.phone,
                Staff.address,
                Staff.description,
            )
            .select_from(ProjectMember)
            .outerjoin(Staff, Staff.id == ProjectMember.staff_id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.id)
        )
        return [member_row_to_dict(r) for r in self.session.execute(stmt).all()]

    def projects_of_staff(self, staff_id: int) -> List[dict]:
        stmt = (
            select(
                ProjectMember.id,
                ProjectMember.start_time,
                ProjectMember.end_time,
                ProjectMember.created_at,
                Project.id.label("project_id"),
                Project.name.label("project_name"),
                Project.description.label("project_description"),
                Project.project_status,
            )
            .select_from(ProjectMember)
            .outerjoin(Project, Project.id == ProjectMember.project_id)
            .where(ProjectMember.staff_id == staff_id)
            .order_by(ProjectMember.id)
        )
        return [member_row_to_dict(r) for r in self.session.execute(stmt).all()]

    def count_active(self) -> int:
        stmt = select(func.count(ProjectMember.id)).where(ProjectMember.end_time.is_(None))
        return self.session.execute(stmt).scalar() or 0

