# services/dashboard_service.py
from sqlalchemy.orm import Session

from repositories.center_repository import CenterRepository
from repositories.project_member_repository import ProjectMemberRepository
from repositories.project_repository import ProjectRepository
from repositories.staff_repository import StaffRepository


class DashboardService:
    """首页汇总：一次查询返回各类计数"""

    def __init__(self, session: Session):
        self.centers = CenterRepository(session)
        self.projects = ProjectRepository(session)
        self.staff = StaffRepository(session)
        self.members = ProjectMemberRepository(session)

    def summary(self) -> dict:
        return {
            "totalCenters": self.centers.count_all(),
            "totalProjects": self.projects.count_all(),
            "totalStaff": self.staff.count_all(),
            "activeMemberships": self.members.count_active(),
            "centers": self.centers.summary_counts(),
            "projectsByStatus": self.projects.status_breakdown(),
        }
