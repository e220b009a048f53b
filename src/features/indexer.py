"""Index tables for categorical product attributes."""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from src.features.exceptions import UnknownCategoricalValueError


def build_index(values: Iterable[str]) -> Mapping[str, int]:
    """Map each distinct value to a contiguous integer index.

    Indices follow first-occurrence order in ``values``; nothing is sorted, so
    the same input always produces the same table.

    Example:
        >>> dict(build_index(["shoes", "shirts", "shoes"]))
        {'shoes': 0, 'shirts': 1}
    """
    index = {}
    for value in values:
        if value not in index:
            index[value] = len(index)
    return MappingProxyType(index)


def lookup_index(
    index: Mapping[str, int],
    value: str,
    field: str,
    product_name: Optional[str] = None,
) -> int:
    """Return the index of ``value``.

    There is no bucket for unseen values: a miss is fatal.

    Raises:
        UnknownCategoricalValueError: If ``value`` is not in ``index``.
    """
    try:
        return index[value]
    except KeyError:
        raise UnknownCategoricalValueError(field, value, product_name) from None
