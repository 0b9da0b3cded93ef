from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import joinedload

from constants.sort_fields import ProjectSortField
from constants.statuses import ProjectStatus
from models.project import Project, ProjectMember
from models.staff import Staff
from repositories.base import BaseRepository, count_when
from utils.pagination import PageParams


class ProjectRepository(BaseRepository):

    def get_by_id(self, project_id: int) -> Optional[Project]:
        stmt = (
            select(Project)
            .options(joinedload(Project.center))
            .where(Project.id == project_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def exists(self, project_id: int) -> bool:
        stmt = select(Project.id).where(Project.id == project_id)
        return self.session.execute(stmt).first() is not None

    def name_taken_in_center(self, center_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Project.id).where(Project.center_id == center_id, Project.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Project.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def create(self, center_id: int, name: str, description: Optional[str], project_status: str) -> Project:
        project = Project(
            center_id=center_id,
            name=name.strip(),
            description=description,
            project_status=project_status,
        )
        return self.add(project)

    def update(self, project: Project, center_id: int, name: str, description: Optional[str],
               project_status: str) -> Project:
        project.center_id = center_id
        project.name = name.strip()
        project.description = description
        project.project_status = project_status
        self.session.flush()
        return project

    def list(self, search: Optional[str], center_id: Optional[int], project_status: Optional[str],
             sort_field: ProjectSortField, descending: bool,
             page: PageParams) -> Tuple[List[tuple], int]:
        member_count = (
            select(func.count(ProjectMember.id))
            .where(ProjectMember.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
            .label("member_count")
        )
        stmt = select(Project, member_count).options(joinedload(Project.center))
        if search:
            term = f"%{search.strip()}%"
            stmt = stmt.where(or_(Project.name.ilike(term), Project.description.ilike(term)))
        if center_id:
            stmt = stmt.where(Project.center_id == center_id)
        if project_status:
            stmt = stmt.where(Project.project_status == project_status)
        col = getattr(Project, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), Project.id.desc())
        return self.paginate(stmt, page)

    def count_members(self, project_id: int) -> int:
        stmt = select(func.count(ProjectMember.id)).where(ProjectMember.project_id == project_id)
        return self.session.execute(stmt).scalar() or 0

    def count_all(self) -> int:
        return self.session.execute(select(func.count(Project.id))).scalar() or 0

    # ---------- 统计 ----------
    def member_stats(self, project_id: int) -> dict:
        stmt = select(
            func.count(ProjectMember.id),
            count_when(ProjectMember.end_time.is_(None)),
            count_when(ProjectMember.end_time.isnot(None)),
        ).where(ProjectMember.project_id == project_id)
        total, active, completed = self.session.execute(stmt).one()
        return {
            "total_members": int(total or 0),
            "active_members": int(active or 0),
            "completed_members": int(completed or 0),
        }

    def gender_distribution(self, project_id: int) -> List[dict]:
        stmt = (
            select(Staff.gender, func.count(ProjectMember.id))
            .select_from(ProjectMember)
            .outerjoin(Staff, Staff.id == ProjectMember.staff_id)
            .where(ProjectMember.project_id == project_id)
            .group_by(Staff.gender)
            .order_by(Staff.gender)
        )
        return [{"gender": g, "count": int(c)} for g, c in self.session.execute(stmt).all()]

    def status_breakdown(self) -> Dict[str, int]:
        stmt = select(Project.project_status, func.count(Project.id)).group_by(Project.project_status)
        counts = dict(self.session.execute(stmt).all())
        return {s.value: int(counts.get(s.value, 0)) for s in ProjectStatus}
