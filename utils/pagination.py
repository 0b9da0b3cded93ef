import math
from dataclasses import dataclass

from flask import current_app, has_app_context


def _to_int(raw, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_page_params(args) -> PageParams:
    """page 从 1 开始；limit 夹在 [1, MAX_PAGE_SIZE]"""
    default_limit, max_limit = 10, 1000
    if has_app_context():
        default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", default_limit)
        max_limit = current_app.config.get("MAX_PAGE_SIZE", max_limit)
    page = max(_to_int(args.get("page"), 1), 1)
    limit = min(max(_to_int(args.get("limit"), default_limit), 1), max_limit)
    return PageParams(page=page, limit=limit)


def build_pagination(params: PageParams, total: int) -> dict:
    total_pages = math.ceil(total / params.limit) if params.limit else 0
    return {
        "currentPage": params.page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": params.limit,
        "hasNextPage": params.page < total_pages,
        "hasPrevPage": params.page > 1,
    }
