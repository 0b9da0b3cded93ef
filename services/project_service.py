# services/project_service.py
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import ProjectSortField, resolve_sort
from constants.statuses import PROJECT_STATUS_LIST
from repositories.center_repository import CenterRepository
from repositories.project_member_repository import ProjectMemberRepository
from repositories.project_repository import ProjectRepository
from utils.exceptions import CenterNotFound, DuplicateName, HasDependents, NotFound
from utils.pagination import PageParams, build_pagination
from utils.validators import FieldErrors

logger = logging.getLogger(__name__)


class ProjectService:

    def __init__(self, session: Session):
        self.repo = ProjectRepository(session)
        self.centers = CenterRepository(session)
        self.members = ProjectMemberRepository(session)

    @staticmethod
    def validate(data: dict) -> dict:
        errors = FieldErrors(data)
        name = errors.length("name", 2, 255, "Project name must be between 2 and 255 characters")
        description = errors.length("description", 0, 2000,
                                    "Description must not exceed 2000 characters", optional=True)
        center_id = errors.positive_int("center_id", "Center ID must be a positive integer")
        status = errors.one_of("project_status", PROJECT_STATUS_LIST, "Invalid project status")
        errors.raise_if_any()
        return {
            "name": name,
            "description": description,
            "center_id": center_id,
            "project_status": status,
        }

    def _get_or_404(self, project_id: int):
        project = self.repo.get_by_id(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    def _check_refs(self, values: dict, exclude_id=None):
        if not self.centers.exists(values["center_id"]):
            raise CenterNotFound()
        if self.repo.name_taken_in_center(values["center_id"], values["name"], exclude_id=exclude_id):
            raise DuplicateName("Project name already exists in this center")

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(ProjectSortField, args.get("sortBy"), args.get("sortOrder"))
        rows, total = self.repo.list(
            search=args.get("search") or None,
            center_id=args.get("center_id", type=int),
            project_status=args.get("project_status") or None,
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        projects = []
        for project, member_count in rows:
            data = project.to_dict()
            data["member_count"] = int(member_count or 0)
            projects.append(data)
        return {
            "projects": projects,
            "pagination": build_pagination(page, total),
            "filters": {
                "centers": self.centers.options(),
                "statuses": list(PROJECT_STATUS_LIST),
            },
        }

    def get(self, project_id: int) -> dict:
        project = self._get_or_404(project_id)
        members = self.members.members_of_project(project.id)
        return {
            "project": project.to_dict(),
            "members": members,
            "stats": {
                "memberCount": len(members),
                "activeMembers": sum(1 for m in members if not m["end_time"]),
            },
        }

    def create(self, data: dict) -> dict:
        values = self.validate(data)
        self._check_refs(values)
        project = self.repo.create(**values)
        self.repo.commit()
        logger.info("Project created: id=%s center_id=%s", project.id, project.center_id)
        return project.to_dict()

    def update(self, project_id: int, data: dict) -> dict:
        values = self.validate(data)
        project = self._get_or_404(project_id)
        self._check_refs(values, exclude_id=project.id)
        self.repo.update(project, **values)
        self.repo.commit()
        return self.repo.get_by_id(project.id).to_dict()

    def delete(self, project_id: int):
        project = self._get_or_404(project_id)
        if self.repo.count_members(project.id) > 0:
            raise HasDependents("Cannot delete project with associated members")
        self.repo.delete(project)
        self.repo.commit()
        logger.info("Project deleted: id=%s", project_id)

    def stats(self, project_id: int) -> dict:
        self._get_or_404(project_id)
        return {
            "projectId": project_id,
            "members": self.repo.member_stats(project_id),
            "genderDistribution": self.repo.gender_distribution(project_id),
        }
