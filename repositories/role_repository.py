# repositories/role_repository.py
from typing import List, Optional, Tuple

from sqlalchemy import distinct, func, select

from constants.sort_fields import RoleSortField
from constants.statuses import UserStatus
from models.project import ProjectMember
from models.role import Role
from models.staff import Staff
from models.user import User
from repositories.base import BaseRepository, count_when
from utils.pagination import PageParams


class RoleRepository(BaseRepository):

    def get_by_id(self, role_id: int) -> Optional[Role]:
        return self.session.get(Role, role_id)

    def get_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Role.id).where(Role.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Role.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def create(self, name: str) -> Role:
        return self.add(Role(name=name.strip()))

    def update(self, role: Role, name: str) -> Role:
        role.name = name.strip()
        self.session.flush()
        return role

    def list(self, search: Optional[str], sort_field: RoleSortField, descending: bool,
             page: PageParams) -> Tuple[List[tuple], int]:
        user_count = func.count(User.id).label("user_count")
        stmt = (
            select(Role, user_count)
            .outerjoin(User, User.role_id == Role.id)
            .group_by(Role.id)
        )
        if search:
            stmt = stmt.where(Role.name.ilike(f"%{search.strip()}%"))
        col = getattr(Role, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), Role.id.desc())
        return self.paginate(stmt, page)

    def ensure(self, name: str) -> Role:
        role = self.get_by_name(name)
        if role is None:
            role = self.create(name)
        return role

    # ---------- 统计 ----------
    def count_users(self, role_id: int) -> int:
        stmt = select(func.count(User.id)).where(User.role_id == role_id)
        return self.session.execute(stmt).scalar() or 0

    def users_of(self, role_id: int):
        has_staff = select(Staff.id).where(Staff.name == User.name).exists()
        stmt = (
            select(User, has_staff.label("has_staff_profile"))
            .where(User.role_id == role_id)
            .order_by(User.id)
        )
        return self.session.execute(stmt).all()

    def user_status_stats(self, role_id: int) -> dict:
        stmt = select(
            func.count(User.id),
            count_when(User.status == UserStatus.ACTIVE.value),
            count_when(User.status == UserStatus.INACTIVE.value),
            count_when(User.status == UserStatus.SUSPENDED.value),
        ).where(User.role_id == role_id)
        total, active, inactive, suspended = self.session.execute(stmt).one()
        return {
            "total_users": int(total or 0),
            "active_users": int(active or 0),
            "inactive_users": int(inactive or 0),
            "suspended_users": int(suspended or 0),
        }

    def staff_stats(self, role_id: int) -> dict:
        stmt = (
            select(
                func.count(Staff.id),
                count_when(Staff.center_id.isnot(None)),
                count_when(Staff.id.isnot(None) & Staff.center_id.is_(None)),
            )
            .select_from(User)
            .outerjoin(Staff, Staff.name == User.name)
            .where(User.role_id == role_id)
        )
        total, assigned, unassigned = self.session.execute(stmt).one()
        return {
            "total_staff": int(total or 0),
            "assigned_to_center": int(assigned or 0),
            "unassigned": int(unassigned or 0),
        }

    def project_stats(self, role_id: int) -> dict:
        stmt = (
            select(
                func.count(distinct(ProjectMember.project_id)),
                func.count(distinct(ProjectMember.staff_id)),
                count_when(ProjectMember.id.isnot(None) & ProjectMember.end_time.is_(None)),
            )
            .select_from(User)
            .outerjoin(Staff, Staff.name == User.name)
            .outerjoin(ProjectMember, ProjectMember.staff_id == Staff.id)
            .where(User.role_id == role_id)
        )
        total_projects, staff_in_projects, active = self.session.execute(stmt).one()
        return {
            "total_projects": int(total_projects or 0),
            "staff_in_projects": int(staff_in_projects or 0),
            "active_participations": int(active or 0),
        }
