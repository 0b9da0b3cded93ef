# services/center_service.py
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import CenterSortField, resolve_sort
from repositories.center_repository import CenterRepository
from utils.exceptions import DuplicateName, HasDependents, NotFound
from utils.pagination import PageParams, build_pagination
from utils.validators import FieldErrors

logger = logging.getLogger(__name__)


def _staff_brief(staff) -> dict:
    return {
        "id": staff.id,
        "name": staff.name,
        "gender": staff.gender,
        "phone": staff.phone,
        "address": staff.address,
        "description": staff.description,
    }


def _project_brief(project) -> dict:
    data = project.to_dict(with_center=False)
    data.pop("center_id", None)
    return data


class CenterService:

    def __init__(self, session: Session):
        self.repo = CenterRepository(session)

    @staticmethod
    def validate(data: dict) -> dict:
        errors = FieldErrors(data)
        name = errors.required("name", "Center name is required")
        field = errors.required("field", "Field is required")
        address = errors.required("address", "Address is required")
        errors.raise_if_any()
        return {"name": name, "field": field, "address": address}

    def _get_or_404(self, center_id: int):
        center = self.repo.get_by_id(center_id)
        if center is None:
            raise NotFound("Center not found")
        return center

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(CenterSortField, args.get("sortBy"), args.get("sortOrder"))
        rows, total = self.repo.list(
            search=args.get("search") or None,
            field=args.get("field") or None,
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        centers = []
        for center, staff_count, project_count in rows:
            data = center.to_dict()
            data["staff_count"] = int(staff_count or 0)
            data["project_count"] = int(project_count or 0)
            centers.append(data)
        return {
            "centers": centers,
            "pagination": build_pagination(page, total),
            "filters": {"fields": self.repo.distinct_fields()},
        }

    def get(self, center_id: int) -> dict:
        center = self._get_or_404(center_id)
        staff = [_staff_brief(s) for s in self.repo.staff_of(center.id)]
        projects = [_project_brief(p) for p in self.repo.projects_of(center.id)]
        return {
            "center": center.to_dict(),
            "staff": staff,
            "projects": projects,
            "stats": {"staffCount": len(staff), "projectCount": len(projects)},
        }

    def create(self, data: dict) -> dict:
        values = self.validate(data)
        if self.repo.name_taken(values["name"]):
            raise DuplicateName("Center name already exists")
        center = self.repo.create(**values)
        self.repo.commit()
        logger.info("Center created: id=%s name=%s", center.id, center.name)
        return center.to_dict()

    def update(self, center_id: int, data: dict) -> dict:
        values = self.validate(data)
        center = self._get_or_404(center_id)
        if self.repo.name_taken(values["name"], exclude_id=center.id):
            raise DuplicateName("Center name already exists")
        self.repo.update(center, **values)
        self.repo.commit()
        return center.to_dict()

    def delete(self, center_id: int):
        center = self._get_or_404(center_id)
        staff_count, project_count = self.repo.dependents_count(center.id)
        if staff_count > 0 or project_count > 0:
            raise HasDependents("Cannot delete center with associated staff or projects")
        self.repo.delete(center)
        self.repo.commit()
        logger.info("Center deleted: id=%s", center_id)

    def stats(self, center_id: int) -> dict:
        self._get_or_404(center_id)
        return {
            "centerId": center_id,
            "staff": self.repo.staff_gender_stats(center_id),
            "projects": self.repo.project_status_stats(center_id),
        }
