from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class MembershipStatus(str, Enum):
    """由 end_time 推导，不落库"""
    ACTIVE = "active"
    COMPLETED = "completed"


USER_STATUS_SET = {s.value for s in UserStatus}
PROJECT_STATUS_LIST = [s.value for s in ProjectStatus]
GENDER_LIST = [g.value for g in Gender]
MEMBERSHIP_STATUS_SET = {s.value for s in MembershipStatus}
