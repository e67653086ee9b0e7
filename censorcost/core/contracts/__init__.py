"""
Contract Validation Module

Модуль для валидации JSON контрактов входных данных censorcost.
"""

from .validators import (
    ContractValidator,
    RelayBidTraceValidator,
    SchemaLoader,
    validate_relay_bid_trace,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "RelayBidTraceValidator",
    # Functions
    "validate_relay_bid_trace",
]
