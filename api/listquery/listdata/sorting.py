"""Stable multi-field sorting of in-memory records."""

from typing import Any, Callable, List, Sequence, Tuple

from .filters import as_number, as_text, as_utc_datetime
from .schema import BOOLEAN, DATE, NUMBER, get_field_value


def _normalizer(kind: str) -> Callable[[Any], Any]:
    if kind == DATE:
        return as_utc_datetime
    if kind == NUMBER:
        return as_number
    if kind == BOOLEAN:
        return lambda v: None if v is None else bool(v)
    return as_text


def sort_key(key) -> Callable[[Any], Tuple]:
    """Build a key function for one ``SortKey``.

    Missing values compare greater than any present value, so they come
    last in ascending order and first in descending order.
    """
    normalize = _normalizer(key.field.kind)
    name = key.field.name

    def _key(item: Any) -> Tuple:
        value = get_field_value(item, name)
        if value is None:
            return (1, 0)
        normalized = normalize(value)
        if normalized is None:
            return (1, 0)
        return (0, normalized)

    return _key


def sort_items(items: Sequence[Any], keys: Sequence) -> List[Any]:
    """Sort items by an ordered list of sort keys.

    Items equal on every key keep their input order. Sorting runs one
    stable pass per key, least significant key first.
    """
    result = list(items)
    for key in reversed(keys):
        result.sort(key=sort_key(key), reverse=key.descending)
    return result
