# services/staff_service.py
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import StaffSortField, resolve_sort
from constants.statuses import GENDER_LIST
from repositories.center_repository import CenterRepository
from repositories.project_member_repository import ProjectMemberRepository
from repositories.staff_repository import StaffRepository
from utils.exceptions import CenterNotFound, DuplicatePhone, HasDependents, NotFound
from utils.pagination import PageParams, build_pagination
from utils.validators import FieldErrors

logger = logging.getLogger(__name__)


class StaffService:

    def __init__(self, session: Session):
        self.repo = StaffRepository(session)
        self.centers = CenterRepository(session)
        self.members = ProjectMemberRepository(session)

    @staticmethod
    def validate(data: dict) -> dict:
        errors = FieldErrors(data)
        name = errors.required("name", "Name is required")
        gender = errors.one_of("gender", GENDER_LIST, "Gender must be male, female, or other")
        phone = errors.required("phone", "Phone is required")
        address = errors.required("address", "Address is required")
        center_id = errors.positive_int("center_id", "Center is required")
        birth_date = errors.iso_date("birth_date", "Birth date must be a valid date", optional=True)
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            errors.add("description", "Description must be a string")
        errors.raise_if_any()
        return {
            "name": name,
            "gender": gender,
            "phone": phone,
            "address": address,
            "center_id": center_id,
            "birth_date": birth_date,
            "description": description.strip() if description else None,
        }

    def _get_or_404(self, staff_id: int):
        staff = self.repo.get_by_id(staff_id)
        if staff is None:
            raise NotFound("Staff member not found")
        return staff

    def _check_refs(self, values: dict, exclude_id=None):
        if not self.centers.exists(values["center_id"]):
            raise CenterNotFound()
        if self.repo.phone_taken(values["phone"], exclude_id=exclude_id):
            raise DuplicatePhone()

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(StaffSortField, args.get("sortBy"), args.get("sortOrder"))
        rows, total = self.repo.list(
            search=args.get("search") or None,
            center_id=args.get("center_id", type=int),
            gender=args.get("gender") or None,
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        staff = []
        for member, project_count in rows:
            data = member.to_dict()
            data["project_count"] = int(project_count or 0)
            staff.append(data)
        return {
            "staff": staff,
            "pagination": build_pagination(page, total),
            "filters": {
                "centers": self.centers.options(),
                "genders": list(GENDER_LIST),
            },
        }

    def get(self, staff_id: int) -> dict:
        staff = self._get_or_404(staff_id)
        projects = self.members.projects_of_staff(staff.id)
        return {
            "staff": staff.to_dict(),
            "projects": projects,
            "stats": {
                "projectCount": len(projects),
                "activeProjects": sum(1 for p in projects if not p["end_time"]),
            },
        }

    def create(self, data: dict) -> dict:
        values = self.validate(data)
        self._check_refs(values)
        staff = self.repo.create(**values)
        self.repo.commit()
        logger.info("Staff created: id=%s center_id=%s", staff.id, staff.center_id)
        return self.repo.get_by_id(staff.id).to_dict()

    def update(self, staff_id: int, data: dict) -> dict:
        values = self.validate(data)
        staff = self._get_or_404(staff_id)
        self._check_refs(values, exclude_id=staff.id)
        self.repo.update(staff, **values)
        self.repo.commit()
        return self.repo.get_by_id(staff.id).to_dict()

    def delete(self, staff_id: int):
        staff = self._get_or_404(staff_id)
        if self.repo.count_memberships(staff.id) > 0:
            raise HasDependents("Cannot delete staff member with associated project memberships")
        self.repo.delete(staff)
        self.repo.commit()
        logger.info("Staff deleted: id=%s", staff_id)

    def stats(self, staff_id: int) -> dict:
        self._get_or_404(staff_id)
        return {
            "staffId": staff_id,
            "projects": self.repo.membership_stats(staff_id),
            "statusDistribution": self.repo.project_status_distribution(staff_id),
        }
