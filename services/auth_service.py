# services/auth_service.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from constants.roles import DEFAULT_ROLES, RoleName
from extensions.jwt import TokenExpiredError, TokenError, create_token, decode_token
from models.user import User
from repositories.role_repository import RoleRepository
from repositories.user_repository import UserRepository
from utils.exceptions import (
    AccountNotActive,
    InvalidCredentials,
    RoleNotFound,
    TokenExpired,
    TokenInvalid,
    UserNotFound,
    UsernameTaken,
    WrongCurrentPassword,
)
from utils.password import hash_password, verify_password
from utils.permissions import Principal
from utils.validators import USERNAME_RE, FieldErrors

logger = logging.getLogger(__name__)


class AuthService:
    """
    登录 / 注册 / token 校验 / 修改密码。
    - 所有需要登录的接口每次都会通过 authenticate() 重新读取用户，
      token 里的 role 仅供前端展示。
    """

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)

    # ---------- 登录 ----------
    @staticmethod
    def validate_login(data: dict):
        errors = FieldErrors(data)
        username = errors.length("username", 3, 50, "Username must be between 3 and 50 characters")
        password = data.get("password")
        if not isinstance(password, str) or len(password) < 6:
            errors.add("password", "Password must be at least 6 characters long")
        errors.raise_if_any()
        return username, password

    def login(self, data: dict) -> dict:
        username, password = self.validate_login(data)

        user = self.users.find_by_name(username)
        if user is None:
            raise InvalidCredentials()
        # 先校验状态，再校验密码
        if not user.is_active:
            raise AccountNotActive(f"Account is {user.status}")
        if not verify_password(user.password_hash, password):
            logger.info("Login failed for %s: bad password", username)
            raise InvalidCredentials()

        token = create_token(user.id, user.name, user.role_name, user.role_id)
        user_data = user.to_dict()
        user_data["staff"] = self.staff_profile_of(user)
        logger.info("User %s logged in", user.name)
        return {"token": token, "user": user_data}

    def staff_profile_of(self, user: User) -> Optional[dict]:
        """只有分配了角色的用户才带出员工档案"""
        if not user.role_id:
            return None
        staff = self.users.staff_profile(user.name)
        return staff.to_dict(with_center=True) if staff else None

    # ---------- 注册 ----------
    @staticmethod
    def validate_register(data: dict):
        errors = FieldErrors(data)
        errors.length("name", 2, 100, "Name must be between 2 and 100 characters")
        username = errors.length("username", 3, 50, "Username must be between 3 and 50 characters")
        errors.matches("username", USERNAME_RE,
                       "Username must contain only letters, numbers, and underscores")
        password = data.get("password")
        if not isinstance(password, str) or len(password) < 6:
            errors.add("password", "Password must be at least 6 characters long")
        role_id = errors.positive_int("role_id", "Role ID must be a positive integer", optional=True)
        errors.raise_if_any()
        return username, password, role_id

    def register(self, data: dict) -> dict:
        username, password, role_id = self.validate_register(data)
        if self.users.name_taken(username):
            raise UsernameTaken()
        if role_id is not None and self.roles.get_by_id(role_id) is None:
            raise RoleNotFound()

        user = self.users.create(
            name=username,
            password_hash=hash_password(password),
            role_id=role_id,
        )
        self.users.commit()
        logger.info("User registered: %s (id=%s)", user.name, user.id)
        return {
            "user": {
                "id": user.id,
                "name": user.name,
                "status": user.status,
                "role": user.role_name,
            }
        }

    # ---------- token ----------
    def authenticate(self, token: str) -> Principal:
        try:
            payload = decode_token(token)
        except TokenExpiredError:
            raise TokenExpired()
        except TokenError:
            raise TokenInvalid()

        user_id = payload.get("userId")
        if not isinstance(user_id, int):
            raise TokenInvalid()
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        if not user.is_active:
            raise AccountNotActive()
        return Principal(
            id=user.id,
            name=user.name,
            status=user.status,
            role=user.role_name,
            role_id=user.role_id,
        )

    # ---------- 当前用户 ----------
    def me(self, principal: Principal) -> dict:
        user = self.users.find_by_id(principal.id)
        if user is None:
            raise UserNotFound()
        return {"user": user.to_dict(), "staff": self.staff_profile_of(user)}

    # ---------- 修改密码 ----------
    def change_password(self, user_id: int, data: dict):
        errors = FieldErrors(data)
        current = data.get("currentPassword")
        if not isinstance(current, str) or not current:
            errors.add("currentPassword", "Current password is required")
        new = data.get("newPassword")
        if not isinstance(new, str) or len(new) < 6:
            errors.add("newPassword", "New password must be at least 6 characters")
        errors.raise_if_any()

        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        if not verify_password(user.password_hash, current):
            raise WrongCurrentPassword()
        self.users.update_password(user, hash_password(new))
        self.users.commit()
        logger.info("Password changed for user id=%s", user.id)

    # ---------- 启动初始化 ----------
    def ensure_default_roles_and_admin(self, username: str, password: str) -> User:
        for name in DEFAULT_ROLES:
            self.roles.ensure(name)
        admin_role = self.roles.get_by_name(RoleName.ADMIN.value)

        user = self.users.find_by_name(username)
        if user is None:
            user = self.users.create(
                name=username,
                password_hash=hash_password(password),
                role_id=admin_role.id,
            )
            logger.info("Default admin created: %s", username)
        self.session.commit()
        return user
