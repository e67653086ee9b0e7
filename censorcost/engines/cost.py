"""
CostEngine — Точная стоимость цензуры за τ слотов

Стоимость цензуры транзакции на τ последовательных слотов равна сумме
winning bids первых τ записей (во входном порядке): атакующий должен
перебить каждый из них.

ФОРМУЛА:
    C_c(τ) = Σ_{i < τ} bid_value_i

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Суммирование в Python int — переполнение невозможно
2. len(records) < τ → InsufficientData
3. bid_value is None среди первых τ записей → MissingValue
4. τ = 0 → 0 (аддитивная единица, не ошибка)
5. Движок не сортирует записи; порядок — ответственность ingestion-слоя
6. Детерминизм: одинаковый вход → бит-в-бит одинаковый результат
"""

import logging
from decimal import Decimal
from typing import Sequence

from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import InsufficientData, MissingValue
from censorcost.core.math.numerical_safeguards import validate_int_at_least
from censorcost.core.math.precision import EXACT_CONTEXT

log = logging.getLogger(__name__)


def censorship_cost(records: Sequence[SlotRecord], duration: int) -> int:
    """
    Сырая стоимость цензуры на duration слотов.

    Args:
        records: Записи слотов, отсортированные по slot_number
        duration: Длительность цензуры τ (слоты), >= 0

    Returns:
        Сумма bid_value первых duration записей (wei)

    Raises:
        InvalidParameter: Если duration < 0
        InsufficientData: Если len(records) < duration
        MissingValue: Если у одной из первых duration записей нет значения

    Examples:
        >>> records = [SlotRecord(slot_number=i, bid_value=v) for i, v in enumerate([1, 2, 3])]
        >>> censorship_cost(records, 2)
        3
    """
    validate_int_at_least(duration, "duration", 0)

    if len(records) < duration:
        raise InsufficientData(
            f"insufficient data: have {len(records)} slots, need {duration}"
        )

    total = 0
    for index in range(duration):
        record = records[index]
        if not record.has_value():
            raise MissingValue(
                f"missing bid value at index {index} (slot {record.slot_number})"
            )
        total += record.bid_value

    log.debug("censorship cost over %d slots: %d wei", duration, total)
    return total


def average_slot_cost(records: Sequence[SlotRecord], duration: int) -> Decimal:
    """
    Средняя стоимость одного слота в окне duration.

    Используется как avg_bribe для поиска оптимальной длительности атаки.

    Args:
        records: Записи слотов
        duration: Размер окна, >= 1

    Returns:
        censorship_cost(records, duration) / duration (wei, Decimal)

    Raises:
        InvalidParameter: Если duration < 1
        InsufficientData, MissingValue: см. censorship_cost
    """
    validate_int_at_least(duration, "duration", 1)

    total = censorship_cost(records, duration)
    return EXACT_CONTEXT.divide(Decimal(total), Decimal(duration))
