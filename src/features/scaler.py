"""Min/max scaling for continuous attributes (age, price)."""

from typing import Iterable, Tuple

from src.features.exceptions import EmptyInputError


def normalize(value: float, min_value: float, max_value: float) -> float:
    """Rescale a value against observed bounds.

    Returns ``(value - min) / (max - min)``. When both bounds are equal the
    range is treated as 1, so the result is ``value - min``. Values outside
    the bounds are not clamped.

    Example:
        >>> normalize(129.99, 39.99, 199.99)
        0.5625...
    """
    value_range = max_value - min_value
    if value_range == 0:
        value_range = 1.0
    return (value - min_value) / value_range


def compute_bounds(values: Iterable[float], input_name: str = "input") -> Tuple[float, float]:
    """Return ``(min, max)`` of a sequence of values.

    Raises:
        EmptyInputError: If the sequence is empty.
    """
    values = [float(v) for v in values]
    if not values:
        raise EmptyInputError(input_name)
    return min(values), max(values)
