"""
Threshold scenarios — Пороговые сценарии атаки

Фиксированный набор (τ, k, p) сценариев, оцениваемых против набора записей
и нескольких уровней TVL. Используется для быстрого ответа на вопрос
"при каком TVL цензура становится выгодной".

Уровни TVL задаются в display-валюте (USD) и переводятся в wei через курс:
    tvl_wei = tvl_usd / price × 10^18

Сценарий, для которого данных недостаточно (или который упал по другой
причине из таксономии CensorshipAnalysisError), не прерывает пакет:
ошибка сохраняется в отчёте, остальные сценарии оцениваются.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from censorcost.core.domain.profit import ProfitParameters, ProfitResult
from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import CensorshipAnalysisError
from censorcost.core.math.numerical_safeguards import (
    validate_int_at_least,
    validate_non_negative,
    validate_positive,
    validate_probability,
)
from censorcost.core.math.precision import EXACT_CONTEXT, WEI_PER_ETH, from_display, to_decimal
from censorcost.engines.profit import attacker_profit, breakeven_tvl, effective_censorship_cost

log = logging.getLogger(__name__)

# Уровни TVL по умолчанию (display-валюта)
DEFAULT_TVL_LEVELS: tuple[float, ...] = (10e6, 50e6, 100e6, 500e6, 1e9)


# =============================================================================
# SCENARIOS
# =============================================================================


@dataclass(frozen=True)
class ThresholdScenario:
    """Сценарий атаки: длительность, размер картеля, вероятность успеха."""

    name: str
    duration: int
    cartel_size: int
    success_probability: float

    def __post_init__(self):
        validate_int_at_least(self.duration, "duration", 0)
        validate_int_at_least(self.cartel_size, "cartel_size", 1)
        validate_probability(self.success_probability)


DEFAULT_SCENARIOS: tuple[ThresholdScenario, ...] = (
    ThresholdScenario("Conservative", duration=10, cartel_size=3, success_probability=0.1),
    ThresholdScenario("Moderate", duration=10, cartel_size=3, success_probability=0.5),
    ThresholdScenario("Aggressive", duration=10, cartel_size=3, success_probability=0.9),
    ThresholdScenario("Extended", duration=50, cartel_size=5, success_probability=0.5),
)


@dataclass(frozen=True)
class ScenarioReport:
    """Результат оценки одного сценария."""

    scenario: ThresholdScenario
    raw_cost: int | None = None  # wei
    effective_cost: Decimal | None = None  # wei
    alpha: float | None = None
    breakeven_tvl: Decimal | None = None  # wei; None при p == 0
    results: tuple[ProfitResult, ...] = field(default_factory=tuple)
    error: CensorshipAnalysisError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def profitable_levels(self) -> list[ProfitResult]:
        """Уровни TVL, при которых атака прибыльна."""
        return [result for result in self.results if result.is_profitable()]


# =============================================================================
# EVALUATION
# =============================================================================


def tvl_to_wei(tvl: float, price: float) -> Decimal:
    """
    Перевод TVL из display-валюты в wei через курс нативной валюты.

    Examples:
        >>> tvl_to_wei(3000, 3000) == Decimal(10**18)
        True
    """
    validate_non_negative(tvl, "tvl")
    validate_positive(price, "price")
    native = EXACT_CONTEXT.divide(to_decimal(tvl, "tvl"), to_decimal(price, "price"))
    return from_display(native, WEI_PER_ETH)


def evaluate_scenario(
    records: Sequence[SlotRecord],
    scenario: ThresholdScenario,
    tvl_levels: Sequence[float] = DEFAULT_TVL_LEVELS,
    price: float = 3000.0,
) -> ScenarioReport:
    """
    Оценка одного сценария на всех уровнях TVL.

    Args:
        records: Записи слотов
        scenario: Сценарий атаки
        tvl_levels: Уровни TVL (display-валюта)
        price: Курс нативной валюты в display-валюте

    Returns:
        ScenarioReport (error всегда None)

    Raises:
        CensorshipAnalysisError: Любая ошибка движков
    """
    cost = effective_censorship_cost(records, scenario.duration, scenario.cartel_size)

    breakeven = None
    if scenario.success_probability > 0:
        breakeven = breakeven_tvl(
            records, scenario.success_probability, scenario.duration, scenario.cartel_size
        )

    results = tuple(
        attacker_profit(
            records,
            ProfitParameters(
                tvl=tvl_to_wei(level, price),
                success_probability=scenario.success_probability,
                duration=scenario.duration,
                cartel_size=scenario.cartel_size,
            ),
        )
        for level in tvl_levels
    )

    return ScenarioReport(
        scenario=scenario,
        raw_cost=cost.raw_cost,
        effective_cost=cost.effective_cost,
        alpha=cost.alpha,
        breakeven_tvl=breakeven,
        results=results,
    )


def evaluate_scenarios(
    records: Sequence[SlotRecord],
    scenarios: Sequence[ThresholdScenario] = DEFAULT_SCENARIOS,
    tvl_levels: Sequence[float] = DEFAULT_TVL_LEVELS,
    price: float = 3000.0,
) -> list[ScenarioReport]:
    """
    Оценка пакета сценариев.

    Ошибка одного сценария записывается в его отчёт (ScenarioReport.error)
    и логируется как warning; остальные сценарии оцениваются.

    Returns:
        Отчёты в порядке scenarios
    """
    reports = []
    for scenario in scenarios:
        try:
            reports.append(evaluate_scenario(records, scenario, tvl_levels, price))
        except CensorshipAnalysisError as exc:
            log.warning("scenario %s failed: %s", scenario.name, exc)
            reports.append(ScenarioReport(scenario=scenario, error=exc))
    return reports
