# services/user_service.py
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import UserSortField, resolve_sort
from constants.statuses import USER_STATUS_SET, UserStatus
from repositories.project_member_repository import ProjectMemberRepository
from repositories.role_repository import RoleRepository
from repositories.staff_repository import StaffRepository
from repositories.user_repository import UserRepository
from utils.exceptions import NotFound, RoleNotFound, UsernameTaken
from utils.pagination import PageParams, build_pagination
from utils.password import hash_password
from utils.validators import FieldErrors

logger = logging.getLogger(__name__)

USER_STATUS_CHOICES = [s.value for s in UserStatus]


class UserService:
    """用户管理（仅 admin 可调用，权限在控制器层校验）"""

    def __init__(self, session: Session):
        self.repo = UserRepository(session)
        self.roles = RoleRepository(session)
        self.staff = StaffRepository(session)
        self.members = ProjectMemberRepository(session)

    @staticmethod
    def validate(data: dict, creating: bool) -> dict:
        errors = FieldErrors(data)
        name = errors.length("name", 2, 100, "Name must be between 2 and 100 characters")
        password = data.get("password")
        if creating or password is not None:
            if not isinstance(password, str) or len(password) < 6:
                errors.add("password", "Password must be at least 6 characters long")
        status = errors.one_of("status", USER_STATUS_CHOICES,
                               "Status must be active, inactive, or suspended", optional=True)
        role_id = errors.positive_int("role_id", "Role ID must be a positive integer", optional=True)
        errors.raise_if_any()
        return {"name": name, "password": password, "status": status, "role_id": role_id}

    def _get_or_404(self, user_id: int):
        user = self.repo.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def _check_refs(self, values: dict, exclude_id=None):
        if self.repo.name_taken(values["name"], exclude_id=exclude_id):
            raise UsernameTaken()
        if values["role_id"] is not None and self.roles.get_by_id(values["role_id"]) is None:
            raise RoleNotFound()

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(UserSortField, args.get("sortBy"), args.get("sortOrder"))
        status = args.get("status") or None
        rows, total = self.repo.list(
            search=args.get("search") or None,
            status=status if status in USER_STATUS_SET else None,
            role_id=args.get("role_id", type=int),
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        users = []
        for user, role_name, has_staff in rows:
            data = user.to_dict()
            data["role_name"] = role_name
            data["has_staff_profile"] = bool(has_staff)
            users.append(data)
        return {
            "users": users,
            "pagination": build_pagination(page, total),
            "filters": {
                "availableRoles": self.repo.role_options(),
                "availableStatuses": self.repo.status_options(),
            },
        }

    def _staff_profile(self, user):
        if not user.role_id:
            return None
        return self.repo.staff_profile(user.name)

    def get(self, user_id: int) -> dict:
        user = self._get_or_404(user_id)
        profile = self._staff_profile(user)
        memberships = self.members.projects_of_staff(profile.id) if profile else []
        return {
            "user": user.to_dict(),
            "staffProfile": profile.to_dict() if profile else None,
            "projectMemberships": memberships,
            "stats": {
                "projectCount": len(memberships),
                "activeProjects": sum(1 for m in memberships if not m["end_time"]),
            },
        }

    def create(self, data: dict) -> dict:
        values = self.validate(data, creating=True)
        self._check_refs(values)
        user = self.repo.create(
            name=values["name"],
            password_hash=hash_password(values["password"]),
            role_id=values["role_id"],
            status=values["status"],
        )
        self.repo.commit()
        logger.info("User created: id=%s name=%s", user.id, user.name)
        return user.to_dict()

    def update(self, user_id: int, data: dict) -> dict:
        values = self.validate(data, creating=False)
        user = self._get_or_404(user_id)
        self._check_refs(values, exclude_id=user.id)
        user.name = values["name"]
        if values["password"]:
            user.password_hash = hash_password(values["password"])
        if values["status"]:
            user.status = values["status"]
        if "role_id" in data:
            user.role_id = values["role_id"]
        self.repo.commit()
        logger.info("User updated: id=%s", user.id)
        return user.to_dict()

    def delete(self, user_id: int):
        user = self._get_or_404(user_id)
        self.repo.delete(user)
        self.repo.commit()
        logger.info("User deleted: id=%s", user_id)

    def stats(self, user_id: int) -> dict:
        user = self._get_or_404(user_id)
        profile = self.repo.staff_profile(user.name)
        if profile is not None:
            projects = self.staff.membership_stats(profile.id)
        else:
            projects = {"total_projects": 0, "active_projects": 0, "completed_projects": 0}
        return {
            "userId": user.id,
            "staff": {
                "has_staff_profile": 1 if profile else 0,
                "has_center_assignment": 1 if profile and profile.center_id else 0,
            },
            "projects": projects,
        }
