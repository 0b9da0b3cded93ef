import re
from typing import Any, Iterable, List, Optional

from utils.datetime_helpers import parse_iso_date, parse_iso_datetime
from utils.exceptions import ValidationError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
ROLE_NAME_RE = re.compile(r"^[a-zA-Z0-9_\s]+$")

# BIGINT 上限
MAX_ID = 2 ** 63 - 1


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class FieldErrors:
    """
    收集字段级错误，统一在 raise_if_any() 时抛出 ValidationError。
    每条错误: {"field": ..., "msg": ..., "value": ...}
    """

    def __init__(self, data: Optional[dict] = None):
        if data is not None and not isinstance(data, dict):
            raise ValidationError(errors=[
                {"field": "body", "msg": "Request body must be a JSON object", "value": None}
            ])
        self.data = data or {}
        self.items: List[dict] = []

    def add(self, field: str, msg: str):
        self.items.append({"field": field, "msg": msg, "value": self.data.get(field)})

    def has(self, field: str) -> bool:
        return any(e["field"] == field for e in self.items)

    def __bool__(self):
        return bool(self.items)

    # ---------- 规则 ----------
    def required(self, field: str, msg: str) -> Optional[str]:
        value = _clean(self.data.get(field))
        if _is_blank(value):
            self.add(field, msg)
            return None
        return value

    def length(self, field: str, min_len: int, max_len: Optional[int], msg: str,
               optional: bool = False) -> Optional[str]:
        value = self.data.get(field)
        if optional and value is None:
            return None
        value = _clean(value) if isinstance(value, str) else value
        if not isinstance(value, str):
            self.add(field, msg)
            return None
        if len(value) < min_len or (max_len is not None and len(value) > max_len):
            self.add(field, msg)
            return None
        return value

    def matches(self, field: str, pattern: re.Pattern, msg: str) -> None:
        value = _clean(self.data.get(field))
        if isinstance(value, str) and not self.has(field) and not pattern.match(value):
            self.add(field, msg)

    def positive_int(self, field: str, msg: str, optional: bool = False) -> Optional[int]:
        value = self.data.get(field)
        if optional and (value is None or value == ""):
            return None
        if isinstance(value, bool):
            self.add(field, msg)
            return None
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            self.add(field, msg)
            return None
        if number < 1 or number > MAX_ID:
            self.add(field, msg)
            return None
        return number

    def one_of(self, field: str, choices: Iterable[str], msg: str, optional: bool = False) -> Optional[str]:
        value = self.data.get(field)
        if optional and (value is None or value == ""):
            return None
        if value not in set(choices):
            self.add(field, msg)
            return None
        return value

    def iso_datetime(self, field: str, msg: str, optional: bool = False):
        value = self.data.get(field)
        if optional and (value is None or value == ""):
            return None
        parsed = parse_iso_datetime(value)
        if parsed is None:
            self.add(field, msg)
        return parsed

    def iso_date(self, field: str, msg: str, optional: bool = False):
        value = self.data.get(field)
        if optional and (value is None or value == ""):
            return None
        parsed = parse_iso_date(value)
        if parsed is None:
            self.add(field, msg)
        return parsed

    def raise_if_any(self):
        if self.items:
            raise ValidationError(errors=list(self.items))
