"""
Nice-number engine for svgc.

Picks human-readable steps (1, 2, 2.5, 5 or 10 × 10^k) for a numeric
range and produces step-aligned boundaries.  Axis ticks and numeric
histogram bins share the same step rule so bin edges line up with
tick labels.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from .constants import NICE_FACTORS, TICK_EPSILON_FRACTION, TICK_TARGET_COUNT


def nice_step(min_value: float, max_value: float, target_count: float) -> float:
    """Return a nice step that splits ``[min_value, max_value]`` into
    roughly *target_count* intervals.

    Raises ``ValueError`` for an empty or inverted range; callers handle
    the single-value case before asking for a step.
    """
    span = max_value - min_value
    if not span > 0:
        raise ValueError(
            f"nice_step requires max > min, got [{min_value}, {max_value}]"
        )
    if not target_count > 0:
        raise ValueError(f"nice_step requires a positive target, got {target_count}")
    rough = span / target_count
    magnitude = 10.0 ** math.floor(math.log10(rough))
    normalized = rough / magnitude
    for factor in NICE_FACTORS:
        if normalized <= factor:
            return factor * magnitude
    return 10.0 * magnitude


def nice_bounds(min_value: float, max_value: float, step: float) -> Tuple[float, float]:
    """Expand ``[min_value, max_value]`` outwards to multiples of *step*."""
    return (
        math.floor(min_value / step) * step,
        math.ceil(max_value / step) * step,
    )


def interval_count(nice_min: float, nice_max: float, step: float) -> int:
    """Number of *step*-wide intervals between two aligned bounds."""
    return int(round((nice_max - nice_min) / step))


def generate_ticks(
    min_value: float,
    max_value: float,
    target_count: int = TICK_TARGET_COUNT,
) -> List[float]:
    """Return step-aligned tick values covering ``[min_value, max_value]``.

    *target_count* ticks span ``target_count - 1`` intervals.  A zero
    range yields the single tick ``[min_value]``.

    Examples
    --------
    >>> generate_ticks(0, 10)
    [0.0, 2.5, 5.0, 7.5, 10.0]
    >>> generate_ticks(3, 3)
    [3]
    """
    if min_value == max_value:
        return [min_value]
    if min_value > max_value:
        min_value, max_value = max_value, min_value
    step = nice_step(min_value, max_value, max(target_count - 1, 1))
    lo, hi = nice_bounds(min_value, max_value, step)
    limit = hi + step * TICK_EPSILON_FRACTION

    ticks = []
    tick = lo
    while tick <= limit:
        # Re-snap to the step grid to shed accumulated float error
        ticks.append(round(tick / step) * step)
        tick += step
    return ticks


def to_fixed(num: float, digits: int) -> str:
    """Fixed-point text with JavaScript's ``toFixed`` rounding.

    Rounds the exact binary value half away from zero, as the
    embedded runtime does.

    Examples
    --------
    >>> to_fixed(2.5, 0)
    '3'
    >>> to_fixed(1.005, 2)
    '1.00'
    """
    quantum = Decimal(1).scaleb(-digits)
    return format(Decimal(num).quantize(quantum, rounding=ROUND_HALF_UP), 'f')


def _is_exact(num: float, decimals: int) -> bool:
    scaled = num * 10 ** decimals
    return abs(scaled - round(scaled)) < 1e-9 * max(1.0, abs(scaled))


def format_scientific(num: float) -> str:
    """Format as ``mantissa×10^exponent``."""
    exponent = math.floor(math.log10(abs(num)))
    mantissa = num / 10 ** exponent
    if float(mantissa).is_integer():
        text = str(int(mantissa))
    else:
        text = to_fixed(mantissa, 1)
    return f"{text}×10^{exponent}"


def format_number(num: float) -> str:
    """Compact axis-label formatting.

    Very large or very small magnitudes use ``mantissa×10^exponent``;
    otherwise the fewest decimals that represent the value exactly
    (up to 2 at or above 1, up to 4 below).
    """
    if num == 0:
        return "0"
    abs_num = abs(num)
    if abs_num >= 1e6 or abs_num < 1e-3:
        return format_scientific(num)
    if abs_num >= 1:
        if float(num).is_integer():
            return str(int(num))
        if _is_exact(num, 1):
            return to_fixed(num, 1)
        return to_fixed(num, 2)
    if _is_exact(num, 2):
        return to_fixed(num, 2)
    if _is_exact(num, 3):
        return to_fixed(num, 3)
    return to_fixed(num, 4)
