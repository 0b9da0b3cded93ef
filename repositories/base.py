# repositories/base.py
from typing import Any, List, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from utils.pagination import PageParams


def count_when(condition):
    """SUM(CASE WHEN cond THEN 1 ELSE 0 END)"""
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class BaseRepository:
    """
    仓储基类：持有显式注入的 Session。
    - 写操作只 add/flush，不自动 commit，由服务层决定事务边界。
    """

    def __init__(self, session: Session):
        self.session = session

    def add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def delete(self, obj):
        self.session.delete(obj)
        self.session.flush()

    def paginate(self, stmt, page: PageParams) -> Tuple[List[Any], int]:
        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar() or 0
        rows = self.session.execute(stmt.offset(page.offset).limit(page.limit)).all()
        return rows, total

    def commit(self):
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise e
