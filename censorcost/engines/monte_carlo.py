"""
MonteCarloEngine — Стохастическая оценка прибыльности атаки

Три инструмента:
1. simulate_outcomes — n независимых Bernoulli-испытаний успеха атаки
2. profitability_matrix — детерминированная сетка p × V − cost (sensitivity)
3. find_optimal_duration — grid search длительности атаки с затуханием
   вероятности успеха

ФОРМУЛЫ:
    profit_trial = success × V − cost × price       (success ∈ {0, 1})
    p(τ)         = p_0 × exp(−τ / d)
    E[profit](τ) = p(τ) × V − avg_bribe × τ × price

Единицы: cost и avg_bribe — в нативной валюте (ETH), price переводит их
в валюту TVL (USD). Все величины — display-scale float.

Случайность: только явный numpy Generator (инжектируемый, seedable).
Глобальное состояние numpy.random никогда не используется.

Параллелизм: при workers > 1 испытания шардируются по потокам с независимыми
дочерними генераторами (Generator.spawn). Перцентили и экстремумы вычисляются
только после полного слияния всех шардов.

Отмена: между батчами проверяются cancel_event и timeout → SimulationCancelled.
"""

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Final

import numpy as np

from censorcost.core.errors import InvalidParameter, SimulationCancelled
from censorcost.core.math.numerical_safeguards import (
    validate_finite,
    validate_in_range,
    validate_int_at_least,
    validate_non_negative,
    validate_positive,
    validate_probability,
)

log = logging.getLogger(__name__)

# Шаг поиска длительности: 300 слотов × 12 s ≈ 1 час
DEFAULT_DURATION_STEP_SLOTS: Final[int] = 300

# Перцентиль для one-sided VaR (5-й перцентиль распределения прибыли)
VAR_PERCENTILE: Final[float] = 5.0


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class MonteCarloConfig:
    """Конфигурация MonteCarloEngine."""

    # Размер батча испытаний (между батчами проверяется отмена)
    batch_size: int = 10_000

    # Шаг grid search длительности атаки (слоты)
    duration_step: int = DEFAULT_DURATION_STEP_SLOTS

    def __post_init__(self):
        validate_int_at_least(self.batch_size, "batch_size", 1)
        validate_int_at_least(self.duration_step, "duration_step", 1)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class MonteCarloResult:
    """Агрегаты распределения прибыли."""

    expected_profit: float
    profit_std: float
    probability_profitable: float  # Доля испытаний с profit > 0
    value_at_risk_95: float  # 5-й перцентиль прибыли
    median_profit: float
    max_profit: float
    max_loss: float  # Минимальная прибыль выборки
    num_trials: int


@dataclass(frozen=True)
class ProfitabilityPoint:
    """Точка поверхности чувствительности."""

    tvl: float
    success_probability: float
    expected_profit: float


@dataclass(frozen=True)
class OptimalDuration:
    """Результат поиска оптимальной длительности атаки."""

    duration_slots: int
    expected_profit: float
    censorship_cost: float  # avg_bribe × τ (нативная валюта)
    success_probability: float  # p(τ)


# =============================================================================
# HELPERS
# =============================================================================


def _grid(low: float, high: float, steps: int) -> np.ndarray:
    if steps == 1:
        return np.array([low], dtype=np.float64)
    return np.linspace(low, high, steps)


def _validate_range(bounds: tuple[float, float], name: str) -> tuple[float, float]:
    if len(bounds) != 2:
        raise InvalidParameter(f"{name} must be a (min, max) pair, got {bounds!r}")
    low, high = bounds
    validate_finite(low, f"{name}[0]")
    validate_finite(high, f"{name}[1]")
    if low > high:
        raise InvalidParameter(f"{name} is inverted: min {low} > max {high}")
    return float(low), float(high)


# =============================================================================
# MONTE CARLO ENGINE
# =============================================================================


class MonteCarloEngine:
    """Monte-Carlo и sensitivity анализ прибыльности атаки.

    Генератор случайных чисел инжектируется: rng (готовый Generator) или
    seed. Без обоих используется свежая энтропия ОС.

    Единственное состояние между вызовами — позиция генератора: повторный
    simulate_outcomes на том же движке продолжает поток, а не повторяет его.
    Для воспроизводимого прогона нужен новый движок с тем же seed.
    """

    def __init__(
        self,
        config: MonteCarloConfig | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        """Инициализация движка.

        Args:
            config: конфигурация (опционально, используется default)
            rng: явный numpy Generator (имеет приоритет над seed)
            seed: seed для np.random.default_rng
        """
        self.config = config or MonteCarloConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    # -------------------------------------------------------------------------
    # simulation
    # -------------------------------------------------------------------------

    def _run_shard(
        self,
        rng: np.random.Generator,
        trials: int,
        tvl: float,
        cost: float,
        success_probability: float,
        cancel_event: threading.Event | None,
        deadline: float | None,
    ) -> np.ndarray:
        profits = np.empty(trials, dtype=np.float64)
        done = 0
        while done < trials:
            if cancel_event is not None and cancel_event.is_set():
                raise SimulationCancelled(f"simulation cancelled after {done} trials")
            if deadline is not None and time.monotonic() > deadline:
                raise SimulationCancelled(f"simulation timed out after {done} trials")

            batch = min(self.config.batch_size, trials - done)
            success = rng.random(batch) < success_probability
            profits[done:done + batch] = success * tvl - cost
            done += batch
        return profits

    def simulate_outcomes(
        self,
        cost: float,
        tvl: float,
        price: float,
        success_probability: float,
        n: int,
        *,
        workers: int = 1,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> MonteCarloResult:
        """
        Monte-Carlo распределение прибыли атаки.

        Args:
            cost: Стоимость цензуры (нативная валюта, фиксирована на прогон)
            tvl: Value-at-risk (валюта TVL)
            price: Курс нативной валюты в валюте TVL
            success_probability: Вероятность успеха одного испытания
            n: Количество испытаний (>= 1)
            workers: Количество потоков-шардов (>= 1)
            cancel_event: Внешний сигнал отмены
            timeout: Лимит времени в секундах

        Returns:
            MonteCarloResult

        Raises:
            InvalidParameter: Если параметры вне диапазона
            SimulationCancelled: Если сработал cancel_event или timeout
        """
        validate_non_negative(cost, "cost")
        validate_non_negative(tvl, "tvl")
        validate_positive(price, "price")
        validate_probability(success_probability)
        validate_int_at_least(n, "n", 1)
        validate_int_at_least(workers, "workers", 1)
        if timeout is not None:
            validate_positive(timeout, "timeout")

        deadline = time.monotonic() + timeout if timeout is not None else None
        cost_in_tvl_units = float(cost) * float(price)
        workers = min(workers, n)

        if workers == 1:
            profits = self._run_shard(
                self.rng, n, float(tvl), cost_in_tvl_units,
                success_probability, cancel_event, deadline,
            )
        else:
            shard_sizes = [n // workers + (1 if i < n % workers else 0) for i in range(workers)]
            children = self.rng.spawn(workers)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [
                    pool.submit(
                        self._run_shard, child, size, float(tvl), cost_in_tvl_units,
                        success_probability, cancel_event, deadline,
                    )
                    for child, size in zip(children, shard_sizes)
                ]
                # Перцентили требуют полного слияния всех шардов
                profits = np.concatenate([future.result() for future in futures])

        ordered = np.sort(profits)
        var95, median = np.percentile(ordered, [VAR_PERCENTILE, 50.0], method="linear")

        result = MonteCarloResult(
            expected_profit=float(ordered.mean()),
            profit_std=float(ordered.std(ddof=0)),
            probability_profitable=float(np.count_nonzero(ordered > 0) / n),
            value_at_risk_95=float(var95),
            median_profit=float(median),
            max_profit=float(ordered[-1]),
            max_loss=float(ordered[0]),
            num_trials=n,
        )
        log.debug(
            "monte carlo n=%d workers=%d: mean=%.2f p_profit=%.4f",
            n, workers, result.expected_profit, result.probability_profitable,
        )
        return result

    # -------------------------------------------------------------------------
    # sensitivity surface
    # -------------------------------------------------------------------------

    def profitability_matrix(
        self,
        cost: float,
        tvl_range: tuple[float, float],
        prob_range: tuple[float, float],
        steps: int | tuple[int, int],
        price: float = 1.0,
    ) -> list[ProfitabilityPoint]:
        """
        Детерминированная сетка expected_profit = p × V − cost × price.

        Args:
            cost: Стоимость цензуры (нативная валюта)
            tvl_range: (min, max) TVL
            prob_range: (min, max) вероятности, внутри [0, 1]
            steps: Число шагов по обеим осям или пара (tvl_steps, prob_steps);
                один шаг — только минимум диапазона
            price: Курс нативной валюты (default 1.0 — cost уже в валюте TVL)

        Returns:
            Точки в порядке TVL-major (внешний цикл по TVL)
        """
        validate_non_negative(cost, "cost")
        validate_positive(price, "price")
        tvl_low, tvl_high = _validate_range(tvl_range, "tvl_range")
        prob_low, prob_high = _validate_range(prob_range, "prob_range")
        validate_non_negative(tvl_low, "tvl_range[0]")
        validate_in_range(prob_low, "prob_range[0]", 0.0, 1.0)
        validate_in_range(prob_high, "prob_range[1]", 0.0, 1.0)

        tvl_steps, prob_steps = (steps, steps) if isinstance(steps, int) else steps
        validate_int_at_least(tvl_steps, "tvl_steps", 1)
        validate_int_at_least(prob_steps, "prob_steps", 1)

        cost_in_tvl_units = float(cost) * float(price)
        points = []
        for tvl in _grid(tvl_low, tvl_high, tvl_steps):
            for prob in _grid(prob_low, prob_high, prob_steps):
                points.append(
                    ProfitabilityPoint(
                        tvl=float(tvl),
                        success_probability=float(prob),
                        expected_profit=float(prob * tvl - cost_in_tvl_units),
                    )
                )
        return points

    # -------------------------------------------------------------------------
    # optimal duration
    # -------------------------------------------------------------------------

    def find_optimal_duration(
        self,
        avg_bribe: float,
        tvl: float,
        price: float,
        base_probability: float,
        max_duration: int,
        decay_constant: float,
    ) -> OptimalDuration:
        """
        Длительность атаки, максимизирующая ожидаемую прибыль.

        Перебор τ = step, 2·step, ... ≤ max_duration; вероятность успеха
        затухает как p_0 × exp(−τ / decay_constant), моделируя рост
        детекции/защиты со временем.

        Raises:
            InvalidParameter: Если max_duration < duration_step или
                параметры вне диапазона
        """
        validate_non_negative(avg_bribe, "avg_bribe")
        validate_non_negative(tvl, "tvl")
        validate_positive(price, "price")
        validate_probability(base_probability, "base_probability")
        validate_positive(decay_constant, "decay_constant")
        step = self.config.duration_step
        validate_int_at_least(step, "duration_step", 1)
        validate_int_at_least(max_duration, "max_duration", step)

        best: OptimalDuration | None = None
        for tau in range(step, max_duration + 1, step):
            cost = float(avg_bribe) * tau
            probability = base_probability * math.exp(-tau / decay_constant)
            expected = probability * float(tvl) - cost * float(price)

            if best is None or expected > best.expected_profit:
                best = OptimalDuration(
                    duration_slots=tau,
                    expected_profit=expected,
                    censorship_cost=cost,
                    success_probability=probability,
                )

        log.debug("optimal duration %d slots, profit %.2f", best.duration_slots, best.expected_profit)
        return best
