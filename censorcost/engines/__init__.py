"""Engines — вычислительное ядро анализа стоимости цензуры.

- CostEngine: точная сумма bid values за τ слотов
- ConcentrationEngine: коэффициент картеля α и HHI
- ProfitEngine: effective cost, прибыль, breakeven TVL
- StatisticsEngine / MonteCarloEngine: display-scale аналитика
"""

from .concentration import (
    ConcentrationResult,
    builder_counts,
    builder_diversity,
    compute_concentration,
    herfindahl_index,
    rank_builders,
    top_builders,
)
from .cost import average_slot_cost, censorship_cost
from .monte_carlo import (
    MonteCarloConfig,
    MonteCarloEngine,
    MonteCarloResult,
    OptimalDuration,
    ProfitabilityPoint,
)
from .profit import (
    BreakevenAnalysis,
    EffectiveCost,
    attacker_profit,
    breakeven_analysis,
    breakeven_tvl,
    effective_censorship_cost,
    sweep_probability,
)
from .statistics import (
    ConcentrationTrend,
    CostPrediction,
    RollingWindowStats,
    StatisticsConfig,
    StatisticsEngine,
    Summary,
)
from .thresholds import (
    DEFAULT_SCENARIOS,
    DEFAULT_TVL_LEVELS,
    ScenarioReport,
    ThresholdScenario,
    evaluate_scenario,
    evaluate_scenarios,
    tvl_to_wei,
)

__all__ = [
    # Cost
    "censorship_cost",
    "average_slot_cost",
    # Concentration
    "ConcentrationResult",
    "builder_counts",
    "builder_diversity",
    "compute_concentration",
    "herfindahl_index",
    "rank_builders",
    "top_builders",
    # Profit
    "BreakevenAnalysis",
    "EffectiveCost",
    "attacker_profit",
    "breakeven_analysis",
    "breakeven_tvl",
    "effective_censorship_cost",
    "sweep_probability",
    # Statistics
    "StatisticsConfig",
    "StatisticsEngine",
    "Summary",
    "RollingWindowStats",
    "ConcentrationTrend",
    "CostPrediction",
    # Monte-Carlo
    "MonteCarloConfig",
    "MonteCarloEngine",
    "MonteCarloResult",
    "OptimalDuration",
    "ProfitabilityPoint",
    # Thresholds
    "DEFAULT_SCENARIOS",
    "DEFAULT_TVL_LEVELS",
    "ScenarioReport",
    "ThresholdScenario",
    "evaluate_scenario",
    "evaluate_scenarios",
    "tvl_to_wei",
]
