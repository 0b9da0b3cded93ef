from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import joinedload

from constants.sort_fields import StaffSortField
from models.project import Project, ProjectMember
from models.staff import Staff
from repositories.base import BaseRepository, count_when
from utils.pagination import PageParams


class StaffRepository(BaseRepository):

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        stmt = select(Staff).options(joinedload(Staff.center)).where(Staff.id == staff_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def exists(self, staff_id: int) -> bool:
        stmt = select(Staff.id).where(Staff.id == staff_id)
        return self.session.execute(stmt).first() is not None

    def phone_taken(self, phone: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Staff.id).where(Staff.phone == phone)
        if exclude_id is not None:
            stmt = stmt.where(Staff.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def create(self, **fields) -> Staff:
        return self.add(Staff(**fields))

    def update(self, staff: Staff, **fields) -> Staff:
        for key, value in fields.items():
            setattr(staff, key, value)
        self.session.flush()
        return staff

    def list(self, search: Optional[str], center_id: Optional[int], gender: Optional[str],
             sort_field: StaffSortField, descending: bool,
             page: PageParams) -> Tuple[List[tuple], int]:
        project_count = (
            select(func.count(ProjectMember.id))
            .where(ProjectMember.staff_id == Staff.id)
            .correlate(Staff)
            .scalar_subquery()
            .label("project_count")
        )
        stmt = select(Staff, project_count).options(joinedload(Staff.center))
        if search:
            term = f"%{search.strip()}%"
            stmt = stmt.where(or_(
                Staff.name.ilike(term),
                Staff.phone.ilike(term),
                Staff.address.ilike(term),
                Staff.description.ilike(term),
            ))
        if center_id:
            stmt = stmt.where(Staff.center_id == center_id)
        if gender:
            stmt = stmt.where(Staff.gender == gender)
        col = getattr(Staff, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), Staff.id.desc())
        return self.paginate(stmt, page)

    def count_memberships(self, staff_id: int) -> int:
        stmt = select(func.count(ProjectMember.id)).where(ProjectMember.staff_id == staff_id)
        return self.session.execute(stmt).scalar() or 0

    def count_all(self) -> int:
        return self.session.execute(select(func.count(Staff.id))).scalar() or 0

    # ---------- 统计 ----------
    def membership_stats(self, staff_id: int) -> dict:
        stmt = select(
            func.count(ProjectMember.id),
            count_when(ProjectMember.end_time.is_(None)),
            count_when(ProjectMember.end_time.isnot(None)),
        ).where(ProjectMember.staff_id == staff_id)
        total, active, completed = self.session.execute(stmt).one()
        return {
            "total_projects": int(total or 0),
            "active_projects": int(active or 0),
            "completed_projects": int(completed or 0),
        }

    def project_status_distribution(self, staff_id: int) -> List[dict]:
        stmt = (
            select(Project.project_status, func.count(ProjectMember.id))
            .select_from(ProjectMember)
            .outerjoin(Project, Project.id == ProjectMember.project_id)
            .where(ProjectMember.staff_id == staff_id)
            .group_by(Project.project_status)
            .order_by(Project.project_status)
        )
        return [
            {"project_status": s, "count": int(c)}
            for s, c in self.session.execute(stmt).all()
        ]
