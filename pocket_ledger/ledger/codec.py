"""
Monthly Stats Bucket Codec

The stored bucket is flat. Per-category and per-day amounts are kept in
top-level fields whose names carry a prefix:

    totalExpense                 12.50
    totalIncome                1000.00
    expenseByCategory.<catId>    12.50
    incomeByCategory.<catId>   1000.00
    dailyExpense.<dd>            12.50

In memory the bucket is always the nested MonthlyStatsBucket.

decode() turns a stored record into a bucket. delta_patch() builds the
additive field deltas for one transaction; the writer wraps them in
Increment so the store applies them. A bucket is never re-encoded whole.
"""

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from pocket_ledger.models.ledger import CategoryType, MonthlyStatsBucket


TOTAL_EXPENSE_FIELD = "totalExpense"
TOTAL_INCOME_FIELD = "totalIncome"
FIELD_SEPARATOR = "."

_DAY_KEY = re.compile(r"^(0[1-9]|[12][0-9]|3[01])$")


class StatsPrefix(str, Enum):
    """The only prefixes a flattened stats field may carry."""
    EXPENSE_BY_CATEGORY = "expenseByCategory"
    INCOME_BY_CATEGORY = "incomeByCategory"
    DAILY_EXPENSE = "dailyExpense"


# Stored prefix -> MonthlyStatsBucket attribute
PREFIX_FIELDS: dict[StatsPrefix, str] = {
    StatsPrefix.EXPENSE_BY_CATEGORY: "expense_by_category",
    StatsPrefix.INCOME_BY_CATEGORY: "income_by_category",
    StatsPrefix.DAILY_EXPENSE: "daily_expense",
}


def field_path(prefix: StatsPrefix, key: str) -> str:
    """
    Build a flattened field name such as ``expenseByCategory.<id>``.

    The key is a single path segment. Anything that could reach into a
    different field (separators, empty keys, bad day numbers) is refused.

    Raises:
        ValueError: On an unknown prefix or an unsafe key
    """
    prefix = StatsPrefix(prefix)
    if not isinstance(key, str) or not key.strip():
        raise ValueError(f"Empty key for {prefix.value}")
    if FIELD_SEPARATOR in key or "/" in key or "`" in key:
        raise ValueError(f"Unsafe key for {prefix.value}: {key!r}")
    if prefix is StatsPrefix.DAILY_EXPENSE and not _DAY_KEY.match(key):
        raise ValueError(f"Day key must be 01-31, got {key!r}")
    return f"{prefix.value}{FIELD_SEPARATOR}{key}"


def _amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation:
            return Decimal("0")
    return Decimal("0")


def _split(name: str) -> Optional[tuple[StatsPrefix, str]]:
    head, sep, tail = name.partition(FIELD_SEPARATOR)
    if not sep or not tail:
        return None
    try:
        return StatsPrefix(head), tail
    except ValueError:
        return None


def decode(record: Optional[Mapping[str, Any]], month_key: str) -> MonthlyStatsBucket:
    """
    Rebuild the nested bucket from a stored flat record.

    A missing record is the all-zero bucket. Fields without a known
    prefix other than the two totals are ignored.
    """
    bucket = MonthlyStatsBucket(month_key=month_key)
    if not record:
        return bucket

    bucket.total_expense = _amount(record.get(TOTAL_EXPENSE_FIELD))
    bucket.total_income = _amount(record.get(TOTAL_INCOME_FIELD))

    for name, value in record.items():
        split = _split(name)
        if split is None:
            continue
        prefix, key = split
        getattr(bucket, PREFIX_FIELDS[prefix])[key] = _amount(value)

    return bucket


def delta_patch(
    category_type: CategoryType,
    category_id: str,
    day_key: str,
    amount: Decimal,
    sign: int,
) -> dict[str, Decimal]:
    """
    Flat additive delta for one transaction.

    Expense touches the total, the category and the day.
    Income touches the total and the category only; there is no daily
    income breakdown.

    Args:
        category_type: Expense or income
        category_id: Category the amount is booked under
        day_key: Two-digit day of month
        amount: Unsigned magnitude
        sign: +1 to apply, -1 to reverse
    """
    if sign not in (1, -1):
        raise ValueError(f"Sign must be +1 or -1, got {sign}")
    delta = abs(amount) * sign

    if CategoryType(category_type) is CategoryType.EXPENSE:
        return {
            TOTAL_EXPENSE_FIELD: delta,
            field_path(StatsPrefix.EXPENSE_BY_CATEGORY, category_id): delta,
            field_path(StatsPrefix.DAILY_EXPENSE, day_key): delta,
        }
    return {
        TOTAL_INCOME_FIELD: delta,
        field_path(StatsPrefix.INCOME_BY_CATEGORY, category_id): delta,
    }
