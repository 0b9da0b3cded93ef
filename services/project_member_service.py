# services/project_member_service.py
"""
项目成员（员工在项目中的一段任职）。

业务规则：
1. (project_id, staff_id) 唯一。
2. 同一员工的任职时间段不能冲突（见 ProjectMemberRepository.has_overlap）。
3. end_time 为空表示任职中；complete() 只能对任职中的记录调用一次。

检查与写入之间没有加锁，并发写入同一员工时可能漏判，
由数据库唯一约束兜底 (project_id, staff_id)。
"""
import logging

from sqlalchemy.orm import Session

from constants.sort_fields import MemberSortField, resolve_sort
from constants.statuses import MEMBERSHIP_STATUS_SET
from repositories.project_member_repository import ProjectMemberRepository
from repositories.project_repository import ProjectRepository
from repositories.staff_repository import StaffRepository
from utils.datetime_helpers import elapsed_days, utcnow
from utils.exceptions import (
    AlreadyCompleted,
    DuplicateMembership,
    InvalidEndTime,
    NotFound,
    OverlappingAssignment,
    ProjectNotFound,
    StaffNotFound,
)
from utils.pagination import PageParams, build_pagination
from utils.validators import FieldErrors

logger = logging.getLogger(__name__)

END_AFTER_START = "End time must be after start time"


class ProjectMemberService:

    def __init__(self, session: Session):
        self.repo = ProjectMemberRepository(session)
        self.projects = ProjectRepository(session)
        self.staff = StaffRepository(session)

    @staticmethod
    def validate(data: dict) -> dict:
        errors = FieldErrors(data)
        project_id = errors.positive_int("project_id", "Project ID must be a positive integer")
        staff_id = errors.positive_int("staff_id", "Staff ID must be a positive integer")
        start_time = errors.iso_datetime("start_time", "Start time must be a valid ISO 8601 date")
        end_time = errors.iso_datetime("end_time", "End time must be a valid ISO 8601 date", optional=True)
        if start_time and end_time and end_time <= start_time:
            errors.add("end_time", END_AFTER_START)
        errors.raise_if_any()
        return {
            "project_id": project_id,
            "staff_id": staff_id,
            "start_time": start_time,
            "end_time": end_time,
        }

    def _get_or_404(self, member_id: int):
        member = self.repo.get_by_id(member_id)
        if member is None:
            raise NotFound("Project member not found")
        return member

    def _check_rules(self, values: dict, exclude_id=None):
        if not self.projects.exists(values["project_id"]):
            raise ProjectNotFound()
        if not self.staff.exists(values["staff_id"]):
            raise StaffNotFound()
        if self.repo.pair_exists(values["project_id"], values["staff_id"], exclude_id=exclude_id):
            raise DuplicateMembership()
        if self.repo.has_overlap(values["staff_id"], values["start_time"], values["end_time"],
                                 exclude_id=exclude_id):
            raise OverlappingAssignment()

    # ---------- 写 ----------
    def create(self, data: dict) -> dict:
        values = self.validate(data)
        self._check_rules(values)
        member = self.repo.create(**values)
        self.repo.commit()
        logger.info("Project member added: id=%s project_id=%s staff_id=%s",
                    member.id, member.project_id, member.staff_id)
        return self.repo.get_detail(member.id)

    def update(self, member_id: int, data: dict) -> dict:
        values = self.validate(data)
        member = self._get_or_404(member_id)
        self._check_rules(values, exclude_id=member.id)
        self.repo.update(member, **values)
        self.repo.commit()
        return self.repo.get_detail(member.id)

    def delete(self, member_id: int):
        member = self._get_or_404(member_id)
        self.repo.delete(member)
        self.repo.commit()
        logger.info("Project member removed: id=%s", member_id)

    def complete(self, member_id: int, data: dict) -> dict:
        errors = FieldErrors(data)
        end_time = errors.iso_datetime("end_time", "End time must be a valid ISO 8601 date", optional=True)
        errors.raise_if_any()

        member = self._get_or_404(member_id)
        if member.end_time is not None:
            raise AlreadyCompleted()
        end_time = end_time or utcnow()
        if end_time <= member.start_time:
            raise InvalidEndTime(END_AFTER_START)
        self.repo.set_end_time(member, end_time)
        self.repo.commit()
        logger.info("Project member completed: id=%s", member_id)
        return self.repo.get_detail(member_id)

    # ---------- 读 ----------
    @staticmethod
    def _duration(member) -> dict:
        return {
            "days": elapsed_days(member.start_time, member.end_time),
            "isActive": member.end_time is None,
        }

    def get(self, member_id: int) -> dict:
        member = self._get_or_404(member_id)
        return {"member": self.repo.get_detail(member.id), "duration": self._duration(member)}

    def list(self, args, page: PageParams) -> dict:
        sort_field, descending = resolve_sort(MemberSortField, args.get("sortBy"), args.get("sortOrder"))
        status = args.get("status") or None
        members, total = self.repo.list(
            project_id=args.get("project_id", type=int),
            staff_id=args.get("staff_id", type=int),
            status=status if status in MEMBERSHIP_STATUS_SET else None,
            sort_field=sort_field,
            descending=descending,
            page=page,
        )
        return {
            "members": members,
            "pagination": build_pagination(page, total),
            "filters": {
                "availableProjects": self.repo.project_facets(),
                "availableStaff": self.repo.staff_facets(),
            },
        }

    def stats(self, member_id: int) -> dict:
        member = self._get_or_404(member_id)
        return {
            "memberId": member.id,
            "duration": self._duration(member),
            "project": self.projects.member_stats(member.project_id),
        }
