# services/role_service.py
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import RoleSortField, resolve_sort
from repositories.role_repository import RoleRepository
from utils.exceptions import DuplicateName, HasDependents, NotFound
from utils.pagination import PageParams, build_pagination
from utils.validators import ROLE_NAME_RE, FieldErrors

logger = logging.getLogger(__name__)


class RoleService:

    def __init__(self, session: Session):
        self.repo = RoleRepository(session)

    @staticmethod
    def validate(data: dict) -> str:
        errors = FieldErrors(data)
        name = errors.length("name", 2, 100, "Role name must be between 2 and 100 characters")
        errors.matches("name", ROLE_NAME_RE,
                       "Role name can only contain letters, numbers, spaces, and underscores")
        errors.raise_if_any()
        return name

    def _get_or_404(self, role_id: int):
        role = self.repo.get_by_id(role_id)
        if role is None:
            raise NotFound("Role not found")
        return role

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(RoleSortField, args.get("sortBy"), args.get("sortOrder"))
        rows, total = self.repo.list(
            search=args.get("search") or None,
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        roles = []
        for role, user_count in rows:
            data = role.to_dict()
            data["user_count"] = int(user_count or 0)
            roles.append(data)
        return {"roles": roles, "pagination": build_pagination(page, total)}

    def get(self, role_id: int) -> dict:
        role = self._get_or_404(role_id)
        users = []
        for user, has_staff in self.repo.users_of(role.id):
            users.append({
                "id": user.id,
                "name": user.name,
                "status": user.status,
                "has_staff_profile": bool(has_staff),
                **user.timestamps_dict(),
            })
        return {
            "role": role.to_dict(),
            "users": users,
            "stats": self.repo.user_status_stats(role.id),
        }

    def create(self, data: dict) -> dict:
        name = self.validate(data)
        if self.repo.name_taken(name):
            raise DuplicateName("Role name already exists")
        role = self.repo.create(name)
        self.repo.commit()
        logger.info("Role created: id=%s name=%s", role.id, role.name)
        return role.to_dict()

    def update(self, role_id: int, data: dict) -> dict:
        name = self.validate(data)
        role = self._get_or_404(role_id)
        if self.repo.name_taken(name, exclude_id=role.id):
            raise DuplicateName("Role name already exists")
        self.repo.update(role, name)
        self.repo.commit()
        return role.to_dict()

    def delete(self, role_id: int):
        role = self._get_or_404(role_id)
        if self.repo.count_users(role.id) > 0:
            raise HasDependents("Cannot delete role with associated users")
        self.repo.delete(role)
        self.repo.commit()
        logger.info("Role deleted: id=%s", role_id)

    def stats(self, role_id: int) -> dict:
        self._get_or_404(role_id)
        return {
            "roleId": role_id,
            "users": self.repo.user_status_stats(role_id),
            "staff": self.repo.staff_stats(role_id),
            "projects": self.repo.project_stats(role_id),
        }
