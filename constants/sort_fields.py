# -*- coding: utf-8 -*-
"""
sort_fields.py
--------------------------------------------------------------------
列表接口允许的排序字段白名单。
- 每个实体一个枚举，值与模型列名一致。
- resolve_sort 为全函数：非法字段回落到 created_at，非法方向回落到 DESC，
  从不报错，也不会把原始字符串拼进 SQL。
"""
from __future__ import annotations

from enum import Enum
from typing import Tuple, Type, TypeVar


class CenterSortField(str, Enum):
    ID = "id"
    NAME = "name"
    FIELD = "field"
    ADDRESS = "address"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class ProjectSortField(str, Enum):
    ID = "id"
    NAME = "name"
    CENTER_ID = "center_id"
    PROJECT_STATUS = "project_status"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class StaffSortField(str, Enum):
    ID = "id"
    NAME = "name"
    BIRTH_DATE = "birth_date"
    GENDER = "gender"
    CENTER_ID = "center_id"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class UserSortField(str, Enum):
    ID = "id"
    NAME = "name"
    STATUS = "status"
    ROLE_ID = "role_id"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class RoleSortField(str, Enum):
    ID = "id"
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class MemberSortField(str, Enum):
    ID = "id"
    PROJECT_ID = "project_id"
    STAFF_ID = "staff_id"
    START_TIME = "start_time"
    END_TIME = "end_time"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


SORT_ASC = "ASC"
SORT_DESC = "DESC"

F = TypeVar("F", bound=Enum)


def resolve_sort(field_enum: Type[F], sort_by: str | None, sort_order: str | None) -> Tuple[F, bool]:
    """
    :return: (排序字段枚举, 是否倒序)
    """
    try:
        field = field_enum(sort_by)
    except ValueError:
        field = field_enum("created_at")
    order = str(sort_order or "").upper()
    descending = order != SORT_ASC
    return field, descending
