# repositories/center_repository.py
from typing import Dict, List, Optional, Tuple

from sqlalchemy import distinct, func, or_, select

from constants.sort_fields import CenterSortField
from constants.statuses import Gender, ProjectStatus
from models.center import Center
from models.project import Project
from models.staff import Staff
from repositories.base import BaseRepository, count_when
from utils.pagination import PageParams


class CenterRepository(BaseRepository):

    def get_by_id(self, center_id: int) -> Optional[Center]:
        return self.session.get(Center, center_id)

    def exists(self, center_id: int) -> bool:
        stmt = select(Center.id).where(Center.id == center_id)
        return self.session.execute(stmt).first() is not None

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Center.id).where(Center.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Center.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def create(self, name: str, field: str, address: str) -> Center:
        return self.add(Center(name=name, field=field, address=address))

    def update(self, center: Center, name: str, field: str, address: str) -> Center:
        center.name = name
        center.field = field
        center.address = address
        self.session.flush()
        return center

    def list(self, search: Optional[str], field: Optional[str], sort_field: CenterSortField,
             descending: bool, page: PageParams) -> Tuple[List[tuple], int]:
        staff_count = func.count(distinct(Staff.id)).label("staff_count")
        project_count = func.count(distinct(Project.id)).label("project_count")
        stmt = (
            select(Center, staff_count, project_count)
            .outerjoin(Staff, Staff.center_id == Center.id)
            .outerjoin(Project, Project.center_id == Center.id)
            .group_by(Center.id)
        )
        if search:
            term = f"%{search.strip()}%"
            stmt = stmt.where(or_(
                Center.name.ilike(term),
                Center.field.ilike(term),
                Center.address.ilike(term),
            ))
        if field:
            stmt = stmt.where(Center.field == field)
        col = getattr(Center, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), Center.id.desc())
        return self.paginate(stmt, page)

    def distinct_fields(self) -> List[str]:
        stmt = select(Center.field).distinct().order_by(Center.field)
        return [f for (f,) in self.session.execute(stmt).all()]

    def options(self) -> List[dict]:
        rows = self.session.execute(select(Center.id, Center.name).order_by(Center.name)).all()
        return [{"id": cid, "name": name} for cid, name in rows]

    # ---------- 详情 ----------
    def staff_of(self, center_id: int) -> List[Staff]:
        stmt = select(Staff).where(Staff.center_id == center_id).order_by(Staff.id)
        return self.session.execute(stmt).scalars().all()

    def projects_of(self, center_id: int) -> List[Project]:
        stmt = select(Project).where(Project.center_id == center_id).order_by(Project.id)
        return self.session.execute(stmt).scalars().all()

    def dependents_count(self, center_id: int) -> Tuple[int, int]:
        staff = self.session.execute(
            select(func.count(Staff.id)).where(Staff.center_id == center_id)
        ).scalar() or 0
        projects = self.session.execute(
            select(func.count(Project.id)).where(Project.center_id == center_id)
        ).scalar() or 0
        return staff, projects

    # ---------- 统计 ----------
    def staff_gender_stats(self, center_id: int) -> dict:
        stmt = select(
            func.count(Staff.id),
            *[count_when(Staff.gender == g.value) for g in Gender],
        ).where(Staff.center_id == center_id)
        total, *counts = self.session.execute(stmt).one()
        data = {"total_staff": int(total or 0)}
        for g, c in zip(Gender, counts):
            data[f"{g.value}_count"] = int(c or 0)
        return data

    def project_status_stats(self, center_id: int) -> dict:
        stmt = select(
            func.count(Project.id),
            *[count_when(Project.project_status == s.value) for s in ProjectStatus],
        ).where(Project.center_id == center_id)
        total, *counts = self.session.execute(stmt).one()
        data = {"total_projects": int(total or 0)}
        for s, c in zip(ProjectStatus, counts):
            data[f"{s.value}_count"] = int(c or 0)
        return data

    def summary_counts(self) -> List[Dict]:
        """每个中心的员工数/项目数，供仪表盘使用"""
        staff_sq = (
            select(Staff.center_id, func.count(Staff.id).label("cnt"))
            .group_by(Staff.center_id)
            .subquery()
        )
        project_sq = (
            select(Project.center_id, func.count(Project.id).label("cnt"))
            .group_by(Project.center_id)
            .subquery()
        )
        stmt = (
            select(
                Center.id,
                Center.name,
                func.coalesce(staff_sq.c.cnt, 0),
                func.coalesce(project_sq.c.cnt, 0),
            )
            .outerjoin(staff_sq, staff_sq.c.center_id == Center.id)
            .outerjoin(project_sq, project_sq.c.center_id == Center.id)
            .order_by(Center.name, Center.id)
        )
        return [
            {"id": cid, "name": name, "staffCount": int(sc), "projectCount": int(pc)}
            for cid, name, sc, pc in self.session.execute(stmt).all()
        ]

    def count_all(self) -> int:
        return self.session.execute(select(func.count(Center.id))).scalar() or 0
