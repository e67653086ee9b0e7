"""
Precision — Точная арифметика для cost/breakeven пути

Стоимость цензуры суммируется в int (неограниченная точность), а все
производные величины (effective cost, expected revenue, breakeven TVL)
вычисляются в Decimal с фиксированным high-precision контекстом.

Float появляется только на границе отображения (display-scale): статистика,
Monte-Carlo, вывод CLI.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Суммы bid values никогда не используют accumulator фиксированной ширины
2. Float вероятности переводятся в Decimal через десятичное представление,
   а не через двоичное (0.1 → Decimal("0.1"))
3. Все Decimal операции выполняются в EXACT_CONTEXT
"""

from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation
from typing import Final

from censorcost.core.errors import InvalidParameter

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# 96 значащих цифр: uint256 (78 цифр) плюс запас на дробную часть
EXACT_CONTEXT: Final[Context] = Context(prec=96, rounding=ROUND_HALF_EVEN)

# wei в одном ETH
WEI_PER_ETH: Final[int] = 10**18

# Верхняя граница номера слота (u64)
U64_MAX: Final[int] = 2**64 - 1


# =============================================================================
# КОНВЕРСИИ
# =============================================================================


def to_decimal(value: int | float | str | Decimal, name: str = "value") -> Decimal:
    """
    Конверсия скаляра в Decimal без двоичных артефактов float.

    Args:
        value: int, float, десятичная строка или Decimal
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        Decimal представление

    Raises:
        InvalidParameter: Если значение не конечное или не парсится

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal(2**64 - 1)
        Decimal('18446744073709551615')
    """
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be numeric, got {value!r}")

    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, int):
            result = Decimal(value)
        else:
            # repr(float) даёт кратчайшее десятичное представление
            result = Decimal(repr(float(value)) if isinstance(value, float) else str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidParameter(f"{name} is not a valid number: {value!r}") from e

    if not result.is_finite():
        raise InvalidParameter(f"{name} must be finite, got {value!r}")

    return result


def to_display(value: int | Decimal, unit_scale: int = WEI_PER_ETH) -> float:
    """
    Конверсия точного значения (wei) в display-scale float (например, ETH).

    Используется ТОЛЬКО на границе отображения.

    Examples:
        >>> to_display(1_500_000_000_000_000_000)
        1.5
    """
    return float(EXACT_CONTEXT.divide(Decimal(value), Decimal(unit_scale)))


def from_display(value: float | Decimal, unit_scale: int = WEI_PER_ETH) -> Decimal:
    """
    Конверсия display-scale значения (ETH) обратно в точные единицы (wei).

    Examples:
        >>> from_display(1.5) == 1_500_000_000_000_000_000
        True
    """
    return EXACT_CONTEXT.multiply(to_decimal(value), Decimal(unit_scale))
