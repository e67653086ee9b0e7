"""
ConcentrationEngine — Концентрация билдеров и коэффициент картеля α

Вычисляет коэффициент централизации:

    α = (блоки top-k билдеров) / (всего блоков)

Чем выше концентрация, тем дешевле внеплановая координация: картель из
top-k билдеров может сам занять долю α слотов без подкупа.

ВАЖНО (scope coupling): блоки считаются по ВСЕМУ переданному набору записей,
а не по окну τ из CostEngine. Если нужна согласованность окон, вызывающий
код передаёт records[:τ] в оба движка.

Ранжирование: block_count по убыванию, при равенстве — identity по
возрастанию (детерминированный полный порядок).

Herfindahl index (HHI) = Σ share_i² — вспомогательная метрика для трендов
концентрации в StatisticsEngine.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

from censorcost.core.domain.slot_record import BuilderStat, SlotRecord
from censorcost.core.errors import EmptyDataset
from censorcost.core.math.numerical_safeguards import validate_int_at_least

log = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ConcentrationResult:
    """Результат анализа концентрации."""

    alpha_exact: Fraction  # top_k_blocks / total_blocks
    top_k_blocks: int
    total_blocks: int
    cartel_size: int  # Запрошенный k
    effective_cartel_size: int  # k после clamp к числу билдеров
    builders: tuple[BuilderStat, ...]  # Ранжированные билдеры

    @property
    def alpha(self) -> float:
        """Коэффициент концентрации α ∈ [0, 1] (float)."""
        return float(self.alpha_exact)

    @property
    def unique_builders(self) -> int:
        """Количество уникальных билдеров."""
        return len(self.builders)


# =============================================================================
# BUILDER RANKING
# =============================================================================


def builder_counts(records: Sequence[SlotRecord]) -> Counter:
    """
    Количество блоков по каждому билдеру.

    Пустые identity уже нормализованы в SlotRecord ('unknown').
    """
    return Counter(record.builder_identity for record in records)


def _rank(counts: Counter) -> list[BuilderStat]:
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [BuilderStat(identity=identity, block_count=count) for identity, count in ordered]


def rank_builders(records: Sequence[SlotRecord]) -> list[BuilderStat]:
    """
    Билдеры, ранжированные по количеству блоков.

    Порядок: block_count по убыванию, identity по возрастанию при равенстве.

    Args:
        records: Записи слотов

    Returns:
        Список BuilderStat (пустой для пустого набора)
    """
    return _rank(builder_counts(records))


def top_builders(records: Sequence[SlotRecord], k: int) -> list[BuilderStat]:
    """
    Top-k билдеров по количеству блоков.

    Raises:
        InvalidParameter: Если k < 1
        EmptyDataset: Если records пустой
    """
    return list(compute_concentration(records, k).builders[:k])


def builder_diversity(records: Sequence[SlotRecord]) -> int:
    """Количество уникальных билдеров в наборе."""
    return len(builder_counts(records))


# =============================================================================
# CONCENTRATION
# =============================================================================


def compute_concentration(
    records: Sequence[SlotRecord],
    cartel_size: int,
) -> ConcentrationResult:
    """
    Коэффициент концентрации top-k билдеров.

    Args:
        records: Записи слотов (весь набор, без окна τ)
        cartel_size: Размер картеля k >= 1; k больше числа билдеров
            ограничивается их числом (α = 1.0)

    Returns:
        ConcentrationResult

    Raises:
        InvalidParameter: Если cartel_size < 1
        EmptyDataset: Если records пустой
    """
    validate_int_at_least(cartel_size, "cartel_size", 1)

    if len(records) == 0:
        raise EmptyDataset("cannot compute concentration of an empty record set")

    builders = rank_builders(records)
    total_blocks = len(records)
    effective_k = min(cartel_size, len(builders))
    top_k_blocks = sum(stat.block_count for stat in builders[:effective_k])

    result = ConcentrationResult(
        alpha_exact=Fraction(top_k_blocks, total_blocks),
        top_k_blocks=top_k_blocks,
        total_blocks=total_blocks,
        cartel_size=cartel_size,
        effective_cartel_size=effective_k,
        builders=tuple(builders),
    )

    log.debug(
        "concentration k=%d (effective %d): %d/%d blocks, alpha=%.6f",
        cartel_size,
        effective_k,
        top_k_blocks,
        total_blocks,
        result.alpha,
    )
    return result


def herfindahl_index(records: Sequence[SlotRecord]) -> float:
    """
    Herfindahl-Hirschman index: Σ (share_i)².

    Args:
        records: Записи слотов

    Returns:
        HHI ∈ (0, 1]; 1.0 для монополии

    Raises:
        EmptyDataset: Если records пустой
    """
    if len(records) == 0:
        raise EmptyDataset("cannot compute Herfindahl index of an empty record set")

    total = len(records)
    hhi = sum(Fraction(count, total) ** 2 for count in builder_counts(records).values())
    return float(hhi)
