# repositories/user_repository.py
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from constants.sort_fields import UserSortField
from models.role import Role
from models.staff import Staff
from models.user import User
from repositories.base import BaseRepository
from utils.pagination import PageParams


def _has_staff_profile():
    return select(Staff.id).where(Staff.name == User.name).exists().label("has_staff_profile")


class UserRepository(BaseRepository):
    """
    用户仓储。
    说明：
    - 不做业务规则判断（唯一性、角色存在性等由服务层决定），仅做持久化读写。
    - 写操作不自动 commit。
    """

    def find_by_name(self, name: str) -> Optional[User]:
        stmt = select(User).options(joinedload(User.role)).where(User.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.name == name)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def create(self, name: str, password_hash: str, role_id: Optional[int] = None,
               status: Optional[str] = None) -> User:
        user = User(name=name, password_hash=password_hash, role_id=role_id)
        if status:
            user.status = status
        return self.add(user)

    def update_password(self, user: User, new_hash: str) -> User:
        user.password_hash = new_hash
        self.session.flush()
        return user

    def list(self, search: Optional[str], status: Optional[str], role_id: Optional[int],
             sort_field: UserSortField, descending: bool,
             page: PageParams) -> Tuple[List[tuple], int]:
        stmt = (
            select(User, Role.name.label("role_name"), _has_staff_profile())
            .outerjoin(Role, Role.id == User.role_id)
        )
        if search:
            stmt = stmt.where(User.name.ilike(f"%{search.strip()}%"))
        if status:
            stmt = stmt.where(User.status == status)
        if role_id:
            stmt = stmt.where(User.role_id == role_id)
        col = getattr(User, sort_field.value)
        stmt = stmt.order_by(col.desc() if descending else col.asc(), User.id.desc())
        return self.paginate(stmt, page)

    def staff_profile(self, name: str) -> Optional[Staff]:
        """员工档案：Staff.name == User.name，带出中心信息"""
        stmt = (
            select(Staff)
            .options(joinedload(Staff.center))
            .where(Staff.name == name)
            .order_by(Staff.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def role_options(self) -> List[dict]:
        rows = self.session.execute(select(Role.id, Role.name).order_by(Role.name)).all()
        return [{"id": rid, "name": name} for rid, name in rows]

    def status_options(self) -> List[str]:
        stmt = select(User.status).distinct().order_by(User.status)
        return [s for (s,) in self.session.execute(stmt).all()]
