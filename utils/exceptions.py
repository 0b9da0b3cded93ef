# utils/exceptions.py
from typing import List, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    errors: Optional[List[dict]]  # 字段级错误

    default_message = "Request failed"
    default_code = 400

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None,
                 errors: Optional[List[dict]] = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(description=self.message)


# ---------- 400: 入参校验 ----------
class ValidationError(BizError):
    default_message = "Validation failed"


# ---------- 404 / 400: 资源不存在 ----------
class NotFound(BizError):
    """路径上的资源不存在"""
    default_message = "Resource not found"
    default_code = 404


class ReferenceNotFound(BizError):
    """请求体引用的关联记录不存在，按入参错误处理"""
    default_message = "Referenced resource not found"


class ProjectNotFound(ReferenceNotFound):
    default_message = "Project not found"


class StaffNotFound(ReferenceNotFound):
    default_message = "Staff member not found"


class CenterNotFound(ReferenceNotFound):
    default_message = "Center not found"


class RoleNotFound(ReferenceNotFound):
    default_message = "Role not found"


# ---------- 400: 唯一性 / 依赖 / 状态冲突 ----------
class Conflict(BizError):
    default_message = "Conflict"


class DuplicateName(Conflict):
    default_message = "Name already exists"


class DuplicatePhone(Conflict):
    default_message = "Phone number already exists"


class UsernameTaken(Conflict):
    default_message = "Username already exists"


class DuplicateMembership(Conflict):
    default_message = "Staff member is already a member of this project"


class OverlappingAssignment(Conflict):
    default_message = "Staff member has overlapping project assignments during this time period"


class HasDependents(Conflict):
    default_message = "Cannot delete resource with associated records"


class AlreadyCompleted(Conflict):
    default_message = "Project member is already completed"


class InvalidEndTime(Conflict):
    default_message = "End time must be after start time"


class WrongCurrentPassword(Conflict):
    default_message = "Current password is incorrect"


# ---------- 401 ----------
class Unauthenticated(BizError):
    default_message = "Authentication required"
    default_code = 401


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid credentials"


class AccountNotActive(Unauthenticated):
    default_message = "User account is not active"


class TokenInvalid(Unauthenticated):
    default_message = "Invalid token"


class TokenExpired(Unauthenticated):
    default_message = "Token expired"


class UserNotFound(Unauthenticated):
    default_message = "User not found"


# ---------- 403 ----------
class Forbidden(BizError):
    default_message = "Insufficient permissions"
    default_code = 403
