import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional

MONTH_KEY_FORMAT = "{year:04d}_{month:02d}"


@dataclass(frozen=True)
class Month:
    year: int
    month: int

    @property
    def key(self) -> str:
        return MONTH_KEY_FORMAT.format(year=self.year, month=self.month)

    @property
    def days(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]


def month_key_for(value: date) -> str:
    return MONTH_KEY_FORMAT.format(year=value.year, month=value.month)


def day_key_for(value: date) -> str:
    return f"{value.day:02d}"


def month_key(year: int, month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"Year out of range: {year}")
    return MONTH_KEY_FORMAT.format(year=year, month=month)


def parse_month_key(key: str) -> Month:
    try:
        year_part, month_part = key.split("_")
        parsed = Month(int(year_part), int(month_part))
    except ValueError:
        raise ValueError(f"Invalid month key: {key!r}")
    if len(year_part) != 4 or len(month_part) != 2 or not 1 <= parsed.month <= 12:
        raise ValueError(f"Invalid month key: {key!r}")
    return parsed


def shift_month_key(key: str, months: int) -> str:
    parsed = parse_month_key(key)
    index = parsed.year * 12 + (parsed.month - 1) + months
    return month_key(index // 12, index % 12 + 1)


def previous_month_key(key: str) -> str:
    return shift_month_key(key, -1)


def next_month_key(key: str) -> str:
    return shift_month_key(key, 1)


def is_future_month(key: str, *, today: Optional[date] = None) -> bool:
    today = today or date.today()
    # Zero-padded keys compare correctly as strings
    return key > month_key_for(today)


def format_month_display(key: str) -> str:
    parsed = parse_month_key(key)
    return f"{calendar.month_name[parsed.month]} {parsed.year}"
