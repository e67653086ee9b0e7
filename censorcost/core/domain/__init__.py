"""
Domain models and value objects.

Contains the slot-level input entity and the profit model snapshots.
"""

from censorcost.core.domain.profit import ProfitParameters, ProfitResult
from censorcost.core.domain.slot_record import UNKNOWN_BUILDER, BuilderStat, SlotRecord

__all__ = [
    # Slot records
    "UNKNOWN_BUILDER",
    "SlotRecord",
    "BuilderStat",
    # Profit model
    "ProfitParameters",
    "ProfitResult",
]
