"""Decimal arithmetic for percentages and shares.

All rounding uses ROUND_HALF_UP, which for Decimal rounds ties away from zero
(12.345 -> 12.35). Percentages are never held as binary floats.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Sequence

from ..errors import InvalidPercentage
from ..schemas import ShareStructureCFG


def to_percent(value: Any) -> Decimal:
    """Convert a caller-supplied percentage to a finite Decimal.

    Floats are converted through their shortest repr so ``20.1`` becomes
    ``Decimal("20.1")`` rather than its binary expansion.

    Raises:
        InvalidPercentage: If value is not numeric or not finite
    """
    if isinstance(value, bool):
        raise InvalidPercentage(value, "Must be a number.")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidPercentage(value, "Must be a number.") from exc
    else:
        raise InvalidPercentage(value, "Must be a number.")

    if not result.is_finite():
        raise InvalidPercentage(value, "Must be a finite number.")
    return result


def round_percent(value: Decimal, structure: ShareStructureCFG) -> Decimal:
    """Round a percentage to the structure's precision, ties away from zero."""
    return value.quantize(structure.quantum, rounding=ROUND_HALF_UP)


def shares_for(percent: Decimal, structure: ShareStructureCFG) -> int:
    """Whole shares represented by a percentage (1% = shares_per_percent)."""
    raw = percent * structure.shares_per_percent
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def scale_proportionally(
    values: Sequence[Decimal],
    factor: Decimal,
    structure: ShareStructureCFG,
) -> List[Decimal]:
    """Multiply every value by factor and round, keeping the group total exact.

    Each scaled value is rounded half away from zero. Rounding many values
    independently can leave the group total off by several quanta, so the
    residual is then handed out one quantum at a time (largest remainder
    method): when the rounded group falls short, the values that lost the most
    to rounding gain a quantum; when it overshoots, the values that gained the
    most give one back. Ties go to the earlier value.

    The result always sums to ``round_percent(sum(values) * factor)``.

    Example:
        Three holders of 10% each scaled by 10/3:
        exact 33.333..., rounded 33.33 each (sum 99.99)
        target 100.00 -> first holder receives the missing 0.01
        result [33.34, 33.33, 33.33]
    """
    exact = [value * factor for value in values]
    rounded = [round_percent(value, structure) for value in exact]
    if not exact:
        return rounded

    target = round_percent(sum(exact, Decimal("0")), structure)
    quantum = structure.quantum
    steps = int(((target - sum(rounded, Decimal("0"))) / quantum).to_integral_value())
    if steps == 0:
        return rounded

    remainders = [e - r for e, r in zip(exact, rounded)]
    # Largest remainder first when short, most negative first when over
    order = sorted(
        range(len(exact)),
        key=lambda i: remainders[i],
        reverse=steps > 0,
    )

    adjustment = quantum if steps > 0 else -quantum
    for index in order[:abs(steps)]:
        rounded[index] += adjustment
    return rounded
