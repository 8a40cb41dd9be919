"""In-memory evaluation of typed filter predicates.

All predicates of a request are combined with AND. Missing values follow
one rule per filter type, mirrored by the SQL pipeline: string and list
filters read a missing value as "", boolean filters read it as false, and
number, range and date filters never match it.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from ..models.list_page import (
    BooleanFilter,
    DateFilter,
    ListFilter,
    NumberFilter,
    RangeFilter,
    StringFilter,
)
from .schema import get_field_value

logger = logging.getLogger(__name__)


def as_utc_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored value to an aware UTC datetime.

    Naive datetimes are taken to be UTC. Strings must be ISO-8601.
    Anything else, including unparseable strings, yields None.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable date value: {value!r}")
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return None


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _match_string(flt: StringFilter, value: Any, pattern) -> bool:
    text = as_text(value)

    if flt.operator == "regex":
        return pattern.search(text) is not None

    expected = flt.value
    if not flt.case_sensitive:
        text = text.lower()
        expected = expected.lower()

    if flt.operator == "equals":
        return text == expected
    if flt.operator == "not_equals":
        return text != expected
    if flt.operator == "contains":
        return expected in text
    if flt.operator == "starts_with":
        return text.startswith(expected)
    if flt.operator == "ends_with":
        return text.endswith(expected)
    raise ValueError(f"Unsupported string operator: {flt.operator}")


def _match_number(flt: NumberFilter, value: Any) -> bool:
    number = as_number(value)
    if number is None:
        return False

    if flt.operator == "equals":
        return number == flt.value
    if flt.operator == "not_equals":
        return number != flt.value
    if flt.operator == "greater_than":
        return number > flt.value
    if flt.operator == "greater_than_or_equal":
        return number >= flt.value
    if flt.operator == "less_than":
        return number < flt.value
    if flt.operator == "less_than_or_equal":
        return number <= flt.value
    raise ValueError(f"Unsupported number operator: {flt.operator}")


def _match_date(flt: DateFilter, value: Any) -> bool:
    moment = as_utc_datetime(value)
    if moment is None:
        return False

    target = as_utc_datetime(flt.value)
    if flt.operator == "equals":
        return moment.date() == target.date()
    if flt.operator == "before":
        return moment < target
    if flt.operator == "after":
        return moment > target
    if flt.operator == "between":
        return target <= moment <= as_utc_datetime(flt.range_end)
    raise ValueError(f"Unsupported date operator: {flt.operator}")


def _match_list(flt: ListFilter, value: Any) -> bool:
    found = as_text(value) in flt.values
    return found if flt.operator == "in" else not found


def _match_range(flt: RangeFilter, value: Any) -> bool:
    number = as_number(value)
    if number is None:
        return False

    if flt.min is not None:
        if number < flt.min or (number == flt.min and not flt.include_min):
            return False
    if flt.max is not None:
        if number > flt.max or (number == flt.max and not flt.include_max):
            return False
    return True


def _match_boolean(flt: BooleanFilter, value: Any) -> bool:
    return bool(value) == flt.value


def matches_filter(compiled, item: Any) -> bool:
    """Evaluate one compiled filter against an item."""
    flt = compiled.predicate
    value = get_field_value(item, compiled.field.name)

    if isinstance(flt, StringFilter):
        return _match_string(flt, value, compiled.pattern)
    if isinstance(flt, NumberFilter):
        return _match_number(flt, value)
    if isinstance(flt, DateFilter):
        return _match_date(flt, value)
    if isinstance(flt, ListFilter):
        return _match_list(flt, value)
    if isinstance(flt, RangeFilter):
        return _match_range(flt, value)
    if isinstance(flt, BooleanFilter):
        return _match_boolean(flt, value)
    raise ValueError(f"Unsupported filter type: {type(flt).__name__}")


def matches_all(filters: Iterable, item: Any) -> bool:
    """True when the item satisfies every filter; vacuously true for none."""
    return all(matches_filter(compiled, item) for compiled in filters)


def is_active(item: Any, active_field: Optional[str]) -> bool:
    """Soft-delete check: only an explicit False hides an item."""
    if active_field is None:
        return True
    return get_field_value(item, active_field) is not False
