import calendar
import datetime as dt
import re
from dataclasses import dataclass
from typing import Any

from pydantic_core import core_schema

_YM_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


@dataclass(frozen=True, order=True)
class YearMonth:
    """Calendar month used as the key of every sparse monthly mapping.

    Serialized as ``"YYYY-MM"``; compares and hashes as ``(year, month)``.
    """

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")

    @classmethod
    def parse(cls, value: str) -> "YearMonth":
        m = _YM_RE.match(value.strip())
        if not m:
            raise ValueError(f"expected YYYY-MM, got {value!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def from_date(cls, d: dt.date) -> "YearMonth":
        return cls(d.year, d.month)

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def index(self) -> int:
        return self.year * 12 + (self.month - 1)

    @property
    def days(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> dt.date:
        return dt.date(self.year, self.month, 1)

    @property
    def last_day(self) -> dt.date:
        return dt.date(self.year, self.month, self.days)

    def shift(self, months: int) -> "YearMonth":
        y, m = divmod(self.index + months, 12)
        return YearMonth(y, m + 1)

    def contains(self, d: dt.date | None) -> bool:
        return d is not None and d.year == self.year and d.month == self.month

    def __str__(self) -> str:
        return self.key

    @classmethod
    def _validate(cls, v: Any) -> "YearMonth":
        if isinstance(v, cls):
            return v
        if isinstance(v, str):
            return cls.parse(v)
        if isinstance(v, (tuple, list)) and len(v) == 2:
            return cls(int(v[0]), int(v[1]))
        if isinstance(v, dt.date):
            return cls.from_date(v)
        raise ValueError(f"cannot interpret {v!r} as a year-month")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {"type": "string", "pattern": r"^\d{4}-\d{2}$", "examples": ["2025-01"]}
