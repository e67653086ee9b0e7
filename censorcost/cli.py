"""
censorcost — CLI анализа стоимости цензуры

Usage:
    censorcost summary --data data/bribes.json
    censorcost rolling --data data/ --window 1000
    censorcost concentration --data data/ --window 1000
    censorcost predict --data data/ --tau 1800 --eth-price 3500
    censorcost montecarlo --data data/ --tau 1800 --bridge-tvl 5e8 --success-prob 0.8
    censorcost thresholds --data data/ --eth-price 3000

Опции командной строки переопределяют значения из --config (YAML), которые
в свою очередь переопределяют значения по умолчанию AnalysisConfig.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Sequence

from censorcost.config import AnalysisConfig, load_config
from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import CensorshipAnalysisError, EmptyDataset
from censorcost.core.math.precision import to_display
from censorcost.engines.concentration import compute_concentration
from censorcost.engines.cost import average_slot_cost, censorship_cost
from censorcost.engines.monte_carlo import MonteCarloEngine
from censorcost.engines.profit import breakeven_analysis, effective_censorship_cost
from censorcost.engines.statistics import StatisticsEngine
from censorcost.engines.thresholds import DEFAULT_SCENARIOS, evaluate_scenarios, tvl_to_wei
from censorcost.relay.parser import load_records

log = logging.getLogger(__name__)

MODES = ("summary", "rolling", "concentration", "predict", "montecarlo", "thresholds")

# Количество окон, выводимых с начала и с конца ряда
_HEAD_TAIL = 10


def print_header(text: str):
    """Print a formatted header."""
    print()
    print(text)
    print("=" * len(text))


def _head_tail(items: list) -> list[tuple[str, list]]:
    parts = [("First windows:", items[:_HEAD_TAIL])]
    if len(items) > _HEAD_TAIL:
        parts.append(("Last windows:", items[-_HEAD_TAIL:]))
    return parts


# =============================================================================
# MODES
# =============================================================================


def cmd_summary(records: Sequence[SlotRecord], config: AnalysisConfig):
    """Статистическая сводка bid values."""
    print_header("Statistical Summary")

    summary = StatisticsEngine(records, config.statistics).summary()
    print(f"Count:        {summary.count} slots")
    print(f"Total:        {summary.total:.6f} ETH")
    print(f"Mean:         {summary.mean:.6f} ETH")
    print(f"Median:       {summary.median:.6f} ETH")
    print(f"Std Dev:      {summary.std:.6f} ETH")
    print(f"Min:          {summary.min:.6f} ETH")
    print(f"Max:          {summary.max:.6f} ETH")
    for level, value in summary.percentiles:
        print(f"{f'{level:g}th pctl:':<14}{value:.6f} ETH")


def cmd_rolling(records: Sequence[SlotRecord], config: AnalysisConfig):
    """Скользящая статистика."""
    print_header(f"Rolling Statistics (window={config.window_size})")

    rolling = StatisticsEngine(records, config.statistics).rolling_stats(config.window_size)
    if not rolling:
        print("Not enough data for rolling analysis")
        return

    for title, windows in _head_tail(rolling):
        print(f"\n{title}")
        for r in windows:
            print(f"Slot {r.slot_number}: mean={r.mean:.4f} std={r.std:.4f} "
                  f"min={r.min:.4f} max={r.max:.4f} ETH")


def cmd_concentration(records: Sequence[SlotRecord], config: AnalysisConfig):
    """Тренды концентрации билдеров."""
    print_header(f"Builder Concentration Trends (window={config.window_size})")

    overall = compute_concentration(records, config.cartel_size)
    print(f"Unique builders:   {overall.unique_builders}")
    print(f"α(top{config.cartel_size}) overall: {overall.alpha:.3f}")
    for rank, stat in enumerate(overall.builders[:config.cartel_size], start=1):
        print(f"  #{rank} {stat.identity[:18]}  {stat.block_count} blocks "
              f"({stat.share_of(overall.total_blocks) * 100:.1f}%)")

    trends = StatisticsEngine(records, config.statistics).concentration_trends(config.window_size)
    if not trends:
        print("\nNot enough data for concentration analysis")
        return

    for title, windows in _head_tail(trends):
        print(f"\n{title}")
        for t in windows:
            print(f"Slot {t.slot_number}: α(top3)={t.alpha_top3:.3f} α(top5)={t.alpha_top5:.3f} "
                  f"unique={t.unique_builders} HHI={t.herfindahl_index:.3f}")

    n = len(trends)
    print("\nAverage Metrics:")
    print(f"Avg α(top3): {sum(t.alpha_top3 for t in trends) / n:.3f}")
    print(f"Avg α(top5): {sum(t.alpha_top5 for t in trends) / n:.3f}")
    print(f"Avg HHI:     {sum(t.herfindahl_index for t in trends) / n:.3f}")


def cmd_predict(records: Sequence[SlotRecord], config: AnalysisConfig):
    """EMA-прогноз стоимости цензуры."""
    print_header(f"Cost Prediction (τ={config.duration} slots)")

    prediction = StatisticsEngine(records, config.statistics).predict_future_cost(
        config.duration, config.smoothing
    )
    print(f"Predicted total cost: {prediction.predicted_total:.4f} ETH")
    print(f"Predicted cost (USD): ${prediction.predicted_total * config.price:,.2f}")
    print(f"Average per slot:     {prediction.ema_per_slot:.6f} ETH")


def cmd_montecarlo(records: Sequence[SlotRecord], config: AnalysisConfig):
    """Monte-Carlo симуляция, breakeven и оптимальная длительность."""
    print_header(f"Monte Carlo Simulation ({config.simulations} runs)")

    unit_scale = config.statistics.unit_scale
    cost_eth = to_display(censorship_cost(records, config.duration), unit_scale)

    print("\nInput Parameters:")
    print(f"Censorship Cost:     {cost_eth:.4f} ETH (${cost_eth * config.price:,.2f})")
    print(f"Bridge TVL:          ${config.tvl:,.2f}")
    print(f"Success Probability: {config.success_probability * 100:.2f}%")
    print(f"Simulations:         {config.simulations}")

    engine = MonteCarloEngine(config.monte_carlo, seed=config.seed)
    result = engine.simulate_outcomes(
        cost_eth,
        config.tvl,
        config.price,
        config.success_probability,
        config.simulations,
        workers=config.workers,
    )

    print("\nResults:")
    print(f"Expected Profit:        ${result.expected_profit:,.2f}")
    print(f"Profit Std Dev:         ${result.profit_std:,.2f}")
    print(f"Probability Profitable: {result.probability_profitable * 100:.2f}%")
    print(f"Value at Risk (95%):    ${result.value_at_risk_95:,.2f}")
    print(f"Median Profit:          ${result.median_profit:,.2f}")
    print(f"Max Profit:             ${result.max_profit:,.2f}")
    print(f"Max Loss:               ${result.max_loss:,.2f}")

    print_header("Breakeven Analysis")
    tvl_wei = tvl_to_wei(config.tvl, config.price)
    breakeven = breakeven_analysis(
        records, config.success_probability, config.duration, config.cartel_size, tvl_wei
    )
    effective = effective_censorship_cost(records, config.duration, config.cartel_size)
    breakeven_usd = to_display(breakeven.breakeven_tvl, unit_scale) * config.price
    print(f"Cartel alpha (top{config.cartel_size}): {effective.alpha:.3f}")
    print(f"Effective Cost:      {to_display(effective.effective_cost, unit_scale):.4f} ETH")
    print(f"Breakeven TVL:       ${breakeven_usd:,.2f}")
    print(f"Profit Margin:       {breakeven.profit_margin_pct:.2f}%")

    print_header("Optimal Attack Duration")
    avg_bribe = to_display(average_slot_cost(records, config.duration), unit_scale)
    optimal = engine.find_optimal_duration(
        avg_bribe,
        config.tvl,
        config.price,
        config.success_probability,
        config.max_duration,
        config.decay_constant,
    )
    print(f"Duration:            {optimal.duration_slots} slots")
    print(f"Success Probability: {optimal.success_probability * 100:.2f}%")
    print(f"Censorship Cost:     {optimal.censorship_cost:.4f} ETH")
    print(f"Expected Profit:     ${optimal.expected_profit:,.2f}")


def cmd_thresholds(records: Sequence[SlotRecord], config: AnalysisConfig):
    """Пороговые сценарии атаки."""
    print_header("Threshold Analysis")

    unit_scale = config.statistics.unit_scale
    reports = evaluate_scenarios(records, DEFAULT_SCENARIOS, price=config.price)

    for report in reports:
        scenario = report.scenario
        print(f"\n{scenario.name} (τ={scenario.duration}, k={scenario.cartel_size}, "
              f"p={scenario.success_probability:.1f})")
        if not report.ok:
            print(f"  skipped: {report.error}")
            continue

        print(f"  Raw cost:       {to_display(report.raw_cost, unit_scale):.4f} ETH")
        print(f"  Effective cost: {to_display(report.effective_cost, unit_scale):.4f} ETH "
              f"(α={report.alpha:.3f})")
        if report.breakeven_tvl is not None:
            breakeven_usd = to_display(report.breakeven_tvl, unit_scale) * config.price
            print(f"  Breakeven TVL:  ${breakeven_usd:,.2f}")
        for result in report.results:
            tvl_usd = to_display(result.tvl, unit_scale) * config.price
            profit_usd = to_display(result.profit, unit_scale) * config.price
            marker = "PROFITABLE" if result.is_profitable() else "unprofitable"
            print(f"  TVL ${tvl_usd:>16,.0f}: profit ${profit_usd:>18,.2f}  {marker}")


COMMANDS = {
    "summary": cmd_summary,
    "rolling": cmd_rolling,
    "concentration": cmd_concentration,
    "predict": cmd_predict,
    "montecarlo": cmd_montecarlo,
    "thresholds": cmd_thresholds,
}


# =============================================================================
# ENTRY POINT
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="censorcost",
        description="Economic analysis of transaction censorship cost in the PBS block market",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("mode", choices=MODES, help="Analysis mode")
    parser.add_argument("--data", required=True, help="Relay JSON file or directory of JSON files")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")

    # Overrides
    parser.add_argument("--window", type=int, dest="window_size", help="Rolling window size")
    parser.add_argument("--tau", type=int, dest="duration", help="Duration in slots")
    parser.add_argument("--cartel-size", type=int, dest="cartel_size", help="Cartel size k")
    parser.add_argument("--eth-price", type=float, dest="price", help="ETH price in USD")
    parser.add_argument("--bridge-tvl", type=float, dest="tvl", help="Bridge TVL in USD")
    parser.add_argument("--success-prob", type=float, dest="success_probability",
                        help="Attack success probability")
    parser.add_argument("--simulations", type=int, help="Number of Monte Carlo simulations")
    parser.add_argument("--workers", type=int, help="Monte Carlo worker threads")
    parser.add_argument("--seed", type=int, help="Monte Carlo seed")
    return parser


_OVERRIDES = (
    "window_size", "duration", "cartel_size", "price", "tvl",
    "success_probability", "simulations", "workers", "seed",
)


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
        overrides = {key: getattr(args, key) for key in _OVERRIDES if getattr(args, key) is not None}
        config = replace(config, **overrides)

        records = load_records(args.data)
        if not records:
            raise EmptyDataset(f"no slot records loaded from {args.data}")
        print(f"Loaded {len(records)} slot bribes")

        COMMANDS[args.mode](records, config)
    except CensorshipAnalysisError as e:
        log.error("%s failed: %s", args.mode, e)
        return 1
    except OSError as e:
        log.error("cannot read input: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
