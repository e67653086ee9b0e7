"""
StatisticsEngine — Описательная статистика, скользящие окна и EMA-прогноз

Все значения переводятся в display-scale float (по умолчанию wei → ETH).
Эти величины только для отображения и никогда не используются в точном
cost/breakeven пути.

Percentile: линейная интерполяция между порядковыми статистиками по индексу
p/100 × (n − 1) (numpy method="linear").

Стандартное отклонение — популяционное (ddof=0).

Окна:
- rolling_stats / concentration_trends: trailing окно фиксированного размера,
  сдвиг на одну запись; len(records) < window_size → пустой список
  (легитимное состояние "данных пока недостаточно", не ошибка)

Прогноз:
    ema_0 = v_0
    ema_i = s × v_i + (1 − s) × ema_{i−1}
    prediction = ema × τ
Наивная линейная экстраполяция, не модель временного ряда.
"""

import logging
from dataclasses import dataclass
from typing import Final, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import EmptyDataset, InvalidParameter, MissingValue
from censorcost.core.math.numerical_safeguards import (
    validate_in_range,
    validate_int_at_least,
    validate_positive,
)
from censorcost.core.math.precision import WEI_PER_ETH, to_display
from censorcost.engines.concentration import (
    builder_diversity,
    compute_concentration,
    herfindahl_index,
)

log = logging.getLogger(__name__)

# Размеры картеля для трендов концентрации
TREND_SMALL_CARTEL: Final[int] = 3
TREND_LARGE_CARTEL: Final[int] = 5


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class StatisticsConfig:
    """Конфигурация StatisticsEngine."""

    # Делитель wei → display unit (10^18 → ETH)
    unit_scale: int = WEI_PER_ETH

    # Перцентили для summary
    percentiles: tuple[float, ...] = (25.0, 50.0, 75.0, 95.0, 99.0)

    def __post_init__(self):
        validate_int_at_least(self.unit_scale, "unit_scale", 1)
        for level in self.percentiles:
            validate_in_range(level, "percentile", 0, 100)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class Summary:
    """Описательная статистика набора bid values (display-scale)."""

    count: int
    total: float
    mean: float
    std: float
    min: float
    max: float
    median: float
    percentiles: tuple[tuple[float, float], ...] = ()  # (уровень, значение)


@dataclass(frozen=True)
class RollingWindowStats:
    """Агрегат одного trailing окна."""

    slot_number: int  # Слот последней записи окна
    mean: float
    std: float
    min: float
    max: float


@dataclass(frozen=True)
class ConcentrationTrend:
    """Метрики концентрации одного trailing окна."""

    slot_number: int
    alpha_top3: float
    alpha_top5: float
    unique_builders: int
    herfindahl_index: float


@dataclass(frozen=True)
class CostPrediction:
    """EMA-прогноз стоимости цензуры."""

    ema_per_slot: float
    predicted_total: float
    duration: int
    smoothing: float


# =============================================================================
# STATISTICS ENGINE
# =============================================================================


class StatisticsEngine:
    """Статистика по упорядоченному набору SlotRecord.

    Движок не хранит состояния между вызовами: records только читаются,
    display-значения пересчитываются в каждой операции.
    """

    def __init__(
        self,
        records: Sequence[SlotRecord],
        config: StatisticsConfig | None = None,
    ):
        """Инициализация движка.

        Args:
            records: Записи слотов, отсортированные по slot_number
            config: конфигурация (опционально, используется default)
        """
        self.records = records
        self.config = config or StatisticsConfig()

    # -------------------------------------------------------------------------
    # helpers
    # -------------------------------------------------------------------------

    def _display_values(self) -> np.ndarray:
        values = np.empty(len(self.records), dtype=np.float64)
        for i, record in enumerate(self.records):
            if not record.has_value():
                raise MissingValue(
                    f"missing bid value at index {i} (slot {record.slot_number})"
                )
            values[i] = to_display(record.bid_value, self.config.unit_scale)
        return values

    def _require_data(self) -> None:
        if len(self.records) == 0:
            raise EmptyDataset("no slot records available")

    # -------------------------------------------------------------------------
    # summary
    # -------------------------------------------------------------------------

    def summary(self) -> Summary:
        """
        Описательная статистика всех bid values.

        Returns:
            Summary (count, total, mean, population std, min, max, percentiles)

        Raises:
            EmptyDataset: Если записей нет
            MissingValue: Если у записи нет значения
        """
        self._require_data()
        values = self._display_values()

        levels = list(self.config.percentiles)
        computed = np.percentile(values, levels, method="linear")

        result = Summary(
            count=int(values.size),
            total=float(values.sum()),
            mean=float(values.mean()),
            std=float(values.std(ddof=0)),
            min=float(values.min()),
            max=float(values.max()),
            median=float(np.median(values)),
            percentiles=tuple((float(p), float(v)) for p, v in zip(levels, computed)),
        )
        log.debug("summary over %d records: mean=%.6f std=%.6f", result.count, result.mean, result.std)
        return result

    # -------------------------------------------------------------------------
    # rolling windows
    # -------------------------------------------------------------------------

    def rolling_stats(self, window_size: int) -> list[RollingWindowStats]:
        """
        Статистика по trailing окнам фиксированного размера.

        Args:
            window_size: Размер окна (>= 1)

        Returns:
            По одному RollingWindowStats на окно; пустой список, если
            записей меньше window_size

        Raises:
            InvalidParameter: Если window_size < 1
            MissingValue: Если у записи нет значения
        """
        validate_int_at_least(window_size, "window_size", 1)

        if len(self.records) < window_size:
            return []

        windows = sliding_window_view(self._display_values(), window_size)
        means = windows.mean(axis=1)
        stds = windows.std(axis=1, ddof=0)
        mins = windows.min(axis=1)
        maxs = windows.max(axis=1)

        return [
            RollingWindowStats(
                slot_number=self.records[i + window_size - 1].slot_number,
                mean=float(means[i]),
                std=float(stds[i]),
                min=float(mins[i]),
                max=float(maxs[i]),
            )
            for i in range(len(windows))
        ]

    def concentration_trends(self, window_size: int) -> list[ConcentrationTrend]:
        """
        Тренды концентрации билдеров по trailing окнам.

        Для каждого окна: α при k=3 и k=5, число уникальных билдеров, HHI.

        Raises:
            InvalidParameter: Если window_size < 1
        """
        validate_int_at_least(window_size, "window_size", 1)

        if len(self.records) < window_size:
            return []

        trends = []
        for end in range(window_size, len(self.records) + 1):
            window = self.records[end - window_size:end]
            trends.append(
                ConcentrationTrend(
                    slot_number=window[-1].slot_number,
                    alpha_top3=compute_concentration(window, TREND_SMALL_CARTEL).alpha,
                    alpha_top5=compute_concentration(window, TREND_LARGE_CARTEL).alpha,
                    unique_builders=builder_diversity(window),
                    herfindahl_index=herfindahl_index(window),
                )
            )
        return trends

    # -------------------------------------------------------------------------
    # prediction
    # -------------------------------------------------------------------------

    def predict_future_cost(self, duration: int, smoothing: float) -> CostPrediction:
        """
        Наивный EMA-прогноз стоимости цензуры на duration будущих слотов.

        Args:
            duration: Горизонт прогноза τ (слоты, >= 0)
            smoothing: Коэффициент сглаживания s ∈ (0, 1)

        Returns:
            CostPrediction (ema × τ, display-scale)

        Raises:
            InvalidParameter: Если smoothing ∉ (0, 1) или duration < 0
            EmptyDataset: Если записей нет
        """
        validate_int_at_least(duration, "duration", 0)
        validate_positive(smoothing, "smoothing")
        if smoothing >= 1:
            raise InvalidParameter(f"smoothing must be < 1, got {smoothing}")

        self._require_data()
        values = self._display_values()

        ema = float(values[0])
        for value in values[1:]:
            ema = smoothing * float(value) + (1 - smoothing) * ema

        return CostPrediction(
            ema_per_slot=ema,
            predicted_total=ema * duration,
            duration=duration,
            smoothing=smoothing,
        )
