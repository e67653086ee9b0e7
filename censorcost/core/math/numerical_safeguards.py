"""
Numerical Safeguards — Валидация скалярных параметров движков

Модуль обеспечивает единый способ проверки скалярных параметров движков:
- Проверка на NaN/Inf (float и Decimal)
- Проверки диапазонов (вероятности, неотрицательные суммы, целые счётчики)

Все проверки бросают InvalidParameter (подкласс ValueError).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. NaN/Inf никогда не проходят валидацию
2. bool не принимается как целое число
3. Все проверки детерминированы и не имеют побочных эффектов
"""

import math
import numbers
from decimal import Decimal

from censorcost.core.errors import InvalidParameter

Number = int | float | Decimal


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_number(value: Number) -> bool:
    """
    Проверка, является ли число конечным (не NaN, не Inf).

    Args:
        value: int, float или Decimal

    Returns:
        True если значение конечное
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, numbers.Real):
        return math.isfinite(value)
    return False


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_finite(value: Number, name: str) -> None:
    """
    Валидация, что значение — конечное число.

    Raises:
        InvalidParameter: Если value не число, NaN или Inf
    """
    if not is_valid_number(value):
        raise InvalidParameter(f"{name} must be a finite number, got {value!r}")


def validate_positive(value: Number, name: str) -> None:
    """
    Валидация, что значение строго положительное.

    Raises:
        InvalidParameter: Если value <= 0 или NaN/Inf
    """
    validate_finite(value, name)

    if value <= 0:
        raise InvalidParameter(f"{name} must be positive, got {value}")


def validate_non_negative(value: Number, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        InvalidParameter: Если value < 0 или NaN/Inf
    """
    validate_finite(value, name)

    if value < 0:
        raise InvalidParameter(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: Number,
    name: str,
    min_value: Number | None = None,
    max_value: Number | None = None,
) -> None:
    """
    Валидация, что значение в замкнутом диапазоне [min_value, max_value].

    Raises:
        InvalidParameter: Если value вне диапазона или NaN/Inf
    """
    validate_finite(value, name)

    if min_value is not None and value < min_value:
        raise InvalidParameter(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise InvalidParameter(f"{name} must be <= {max_value}, got {value}")


def validate_probability(value: Number, name: str = "success_probability") -> None:
    """
    Валидация вероятности: value ∈ [0, 1].

    Raises:
        InvalidParameter: Если value вне [0, 1] или NaN/Inf
    """
    validate_in_range(value, name, 0, 1)


def validate_int_at_least(value: int, name: str, minimum: int) -> None:
    """
    Валидация целочисленного параметра (длительность, размер картеля, окно).

    Raises:
        InvalidParameter: Если value не int (bool не допускается) или < minimum
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")

    if value < minimum:
        raise InvalidParameter(f"{name} must be at least {minimum}, got {value}")
