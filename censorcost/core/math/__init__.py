"""
Core math modules для censorcost

Точная арифметика и валидация параметров с гарантией детерминизма.
"""

# Numerical Safeguards
from censorcost.core.math.numerical_safeguards import (
    # Checks
    is_valid_number,
    # Validation
    validate_finite,
    validate_in_range,
    validate_int_at_least,
    validate_non_negative,
    validate_positive,
    validate_probability,
)

# Precision
from censorcost.core.math.precision import (
    EXACT_CONTEXT,
    U64_MAX,
    WEI_PER_ETH,
    from_display,
    to_decimal,
    to_display,
)

__all__ = [
    # Numerical Safeguards: Checks
    "is_valid_number",
    # Numerical Safeguards: Validation
    "validate_finite",
    "validate_in_range",
    "validate_int_at_least",
    "validate_non_negative",
    "validate_positive",
    "validate_probability",
    # Precision: Constants
    "EXACT_CONTEXT",
    "U64_MAX",
    "WEI_PER_ETH",
    # Precision: Functions
    "from_display",
    "to_decimal",
    "to_display",
]
