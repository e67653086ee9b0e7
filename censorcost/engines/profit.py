"""
ProfitEngine — Effective cost, ожидаемая прибыль и безубыточность атаки

Объединяет CostEngine и ConcentrationEngine в decision-theoretic модель.

ФОРМУЛЫ:
    C_eff   = (1 − α) × C_c(τ)
    profit  = p × V − C_eff
    V*      = C_eff / p                (breakeven TVL)

Обоснование C_eff: картель, контролирующий долю α блоков, назначает эти
слоты себе без подкупа, поэтому оплачивается только доля (1 − α).

Вероятность успеха p — всегда внешнее предположение; движок её не выводит.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Вся арифметика — int/Decimal (EXACT_CONTEXT), float только в α и p
2. α ∉ [0, 1] → InternalInconsistency (дефект, не ошибка ввода)
3. sweep_probability возвращает результаты по возрастанию p
4. profit(breakeven_tvl(p), p) ≈ 0
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from censorcost.core.domain.profit import ProfitParameters, ProfitResult
from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import InternalInconsistency, InvalidParameter
from censorcost.core.math.numerical_safeguards import (
    validate_int_at_least,
    validate_non_negative,
    validate_probability,
)
from censorcost.core.math.precision import EXACT_CONTEXT, to_decimal
from censorcost.engines.concentration import ConcentrationResult, compute_concentration
from censorcost.engines.cost import censorship_cost

log = logging.getLogger(__name__)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class EffectiveCost:
    """Effective cost цензуры с учётом концентрации."""

    raw_cost: int  # C_c(τ), wei
    effective_cost: Decimal  # (1 − α) × C_c(τ), wei
    concentration: ConcentrationResult
    duration: int

    @property
    def alpha(self) -> float:
        return self.concentration.alpha


@dataclass(frozen=True)
class BreakevenAnalysis:
    """Breakeven TVL и маржа относительно текущего TVL."""

    breakeven_tvl: Decimal  # wei
    effective_cost: Decimal  # wei
    success_probability: float
    current_tvl: Decimal  # wei
    profit_margin_pct: float  # (V − V*) / V × 100; 0 если V == 0


# =============================================================================
# EFFECTIVE COST
# =============================================================================


def effective_censorship_cost(
    records: Sequence[SlotRecord],
    duration: int,
    cartel_size: int,
) -> EffectiveCost:
    """
    Effective cost цензуры: (1 − α) × C_c(τ).

    Стоимость берётся по первым duration записям, концентрация — по всему
    набору records.

    Args:
        records: Записи слотов
        duration: Длительность цензуры τ
        cartel_size: Размер картеля k

    Returns:
        EffectiveCost

    Raises:
        InsufficientData, MissingValue: из CostEngine
        InvalidParameter, EmptyDataset: из ConcentrationEngine
        InternalInconsistency: Если α ∉ [0, 1]
    """
    raw_cost = censorship_cost(records, duration)
    concentration = compute_concentration(records, cartel_size)

    alpha = concentration.alpha_exact
    if alpha < 0 or alpha > 1:
        raise InternalInconsistency(
            f"concentration alpha={float(alpha)} outside [0, 1] "
            f"({concentration.top_k_blocks}/{concentration.total_blocks} blocks)"
        )

    # (1 − α) × C = C × (total − top) / total, одно деление в EXACT_CONTEXT
    paid_blocks = concentration.total_blocks - concentration.top_k_blocks
    effective = EXACT_CONTEXT.divide(
        Decimal(raw_cost * paid_blocks), Decimal(concentration.total_blocks)
    )

    log.debug(
        "effective cost tau=%d k=%d: raw=%d alpha=%.6f effective=%s",
        duration,
        cartel_size,
        raw_cost,
        concentration.alpha,
        effective,
    )
    return EffectiveCost(
        raw_cost=raw_cost,
        effective_cost=effective,
        concentration=concentration,
        duration=duration,
    )


# =============================================================================
# PROFIT
# =============================================================================


def _build_result(
    cost: EffectiveCost,
    tvl: Decimal,
    probability: Decimal,
    cartel_size: int,
) -> ProfitResult:
    expected_revenue = EXACT_CONTEXT.multiply(probability, tvl)
    profit = EXACT_CONTEXT.subtract(expected_revenue, cost.effective_cost)

    return ProfitResult(
        expected_revenue=expected_revenue,
        effective_cost=cost.effective_cost,
        profit=profit,
        alpha=cost.alpha,
        success_probability=float(probability),
        tvl=tvl,
        raw_cost=cost.raw_cost,
        duration=cost.duration,
        cartel_size=cartel_size,
    )


def attacker_profit(records: Sequence[SlotRecord], params: ProfitParameters) -> ProfitResult:
    """
    Ожидаемая прибыль атакующего: p × V − C_eff.

    Args:
        records: Записи слотов
        params: Предположения модели (tvl в wei)

    Returns:
        ProfitResult

    Raises:
        InvalidParameter: Если p ∉ [0, 1] или tvl < 0
        + ошибки effective_censorship_cost
    """
    validate_probability(params.success_probability)
    tvl = to_decimal(params.tvl, "tvl")
    validate_non_negative(tvl, "tvl")

    cost = effective_censorship_cost(records, params.duration, params.cartel_size)
    return _build_result(
        cost, tvl, to_decimal(params.success_probability), params.cartel_size
    )


def _validate_breakeven_probability(success_probability: float) -> None:
    validate_probability(success_probability)
    if success_probability <= 0:
        raise InvalidParameter(
            f"success_probability must be > 0 for breakeven, got {success_probability}"
        )


def breakeven_tvl(
    records: Sequence[SlotRecord],
    success_probability: float,
    duration: int,
    cartel_size: int,
) -> Decimal:
    """
    Минимальный TVL, при котором ожидаемая прибыль неотрицательна.

    V* = C_eff / p

    Raises:
        InvalidParameter: Если p <= 0 или p > 1
        + ошибки effective_censorship_cost
    """
    _validate_breakeven_probability(success_probability)

    cost = effective_censorship_cost(records, duration, cartel_size)
    return EXACT_CONTEXT.divide(cost.effective_cost, to_decimal(success_probability))


def breakeven_analysis(
    records: Sequence[SlotRecord],
    success_probability: float,
    duration: int,
    cartel_size: int,
    current_tvl: int | Decimal,
) -> BreakevenAnalysis:
    """
    Breakeven TVL и маржа прибыли при текущем TVL.

    margin = (V − V*) / V × 100 (0 при V == 0)

    Raises:
        InvalidParameter: Если current_tvl < 0 или p ∉ (0, 1]
    """
    _validate_breakeven_probability(success_probability)
    tvl = to_decimal(current_tvl, "current_tvl")
    validate_non_negative(tvl, "current_tvl")

    cost = effective_censorship_cost(records, duration, cartel_size)
    breakeven = EXACT_CONTEXT.divide(cost.effective_cost, to_decimal(success_probability))

    margin = 0.0
    if tvl > 0:
        headroom = EXACT_CONTEXT.subtract(tvl, breakeven)
        margin = float(EXACT_CONTEXT.divide(EXACT_CONTEXT.multiply(headroom, Decimal(100)), tvl))

    return BreakevenAnalysis(
        breakeven_tvl=breakeven,
        effective_cost=cost.effective_cost,
        success_probability=success_probability,
        current_tvl=tvl,
        profit_margin_pct=margin,
    )


# =============================================================================
# SENSITIVITY SWEEP
# =============================================================================


def sweep_probability(
    records: Sequence[SlotRecord],
    tvl: int | Decimal,
    duration: int,
    cartel_size: int,
    min_p: float,
    max_p: float,
    steps: int,
) -> list[ProfitResult]:
    """
    Прибыль на равномерной сетке вероятностей [min_p, max_p].

    steps = 1 → только min_p. Effective cost вычисляется один раз.

    Returns:
        Список ProfitResult по возрастанию вероятности

    Raises:
        InvalidParameter: Если steps < 1, границы вне [0, 1] или min_p > max_p
    """
    validate_int_at_least(steps, "steps", 1)
    validate_probability(min_p, "min_p")
    validate_probability(max_p, "max_p")
    if min_p > max_p:
        raise InvalidParameter(f"min_p ({min_p}) must be <= max_p ({max_p})")

    tvl_dec = to_decimal(tvl, "tvl")
    validate_non_negative(tvl_dec, "tvl")

    cost = effective_censorship_cost(records, duration, cartel_size)

    low = to_decimal(min_p)
    high = to_decimal(max_p)
    step = Decimal(0) if steps == 1 else EXACT_CONTEXT.divide(high - low, Decimal(steps - 1))

    results = []
    for i in range(steps):
        if steps > 1 and i == steps - 1:
            probability = high
        else:
            probability = EXACT_CONTEXT.add(low, EXACT_CONTEXT.multiply(step, Decimal(i)))
        results.append(_build_result(cost, tvl_dec, probability, cartel_size))

    return results
