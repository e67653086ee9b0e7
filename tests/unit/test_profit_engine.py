"""
Тесты для ProfitEngine

Проверяет:
1. Effective cost = (1 − α) × C_c(τ)
2. Ожидаемую прибыль p × V − C_eff
3. Breakeven TVL и обратное соотношение profit(V*(p), p) ≈ 0
4. Sweep вероятностей (порядок, монотонность, границы)
5. Валидацию параметров
"""

from decimal import Decimal

import pytest

from censorcost.core.domain import ProfitParameters, SlotRecord
from censorcost.core.errors import InsufficientData, InvalidParameter
from censorcost.engines.profit import (
    attacker_profit,
    breakeven_analysis,
    breakeven_tvl,
    effective_censorship_cost,
    sweep_probability,
)

ETH = 10**18


def make_records(values, builders):
    return [
        SlotRecord(slot_number=i + 1, bid_value=value, builder_identity=builder)
        for i, (value, builder) in enumerate(zip(values, builders))
    ]


@pytest.fixture
def two_builders():
    """4 записи, два билдера по два блока, сумма 1000"""
    return make_records([100, 200, 300, 400], ["0xA", "0xB", "0xA", "0xB"])


@pytest.fixture
def monopoly():
    return make_records([100, 200, 300, 400], ["0xM"] * 4)


@pytest.fixture
def mainnet_like():
    """10 записей по 0.05 ETH, 4 билдера"""
    builders = ["0xA", "0xA", "0xA", "0xA", "0xB", "0xB", "0xB", "0xC", "0xC", "0xD"]
    return make_records([5 * 10**16] * 10, builders)


class TestEffectiveCost:
    """Тесты для effective_censorship_cost"""

    def test_half_of_raw_cost(self, two_builders) -> None:
        """α=0.5 → effective = половина сырой суммы"""
        cost = effective_censorship_cost(two_builders, 4, 1)
        assert cost.alpha == 0.5
        assert cost.raw_cost == 1000
        assert cost.effective_cost == Decimal(500)

    def test_monopoly_is_free(self, monopoly) -> None:
        cost = effective_censorship_cost(monopoly, 4, 1)
        assert cost.alpha == 1.0
        assert cost.effective_cost == 0

    def test_window_coupling(self, two_builders) -> None:
        """Стоимость по первым τ записям, концентрация по всему набору"""
        cost = effective_censorship_cost(two_builders, 2, 1)
        assert cost.raw_cost == 300
        assert cost.concentration.total_blocks == 4
        assert cost.effective_cost == Decimal(150)

    def test_non_increasing_in_alpha(self) -> None:
        """При фиксированной сырой стоимости C_eff не растёт с ростом α"""
        values = [10, 20, 30, 40, 50, 60]
        layouts = [
            ["0xA", "0xB", "0xC", "0xD", "0xE", "0xF"],
            ["0xA", "0xA", "0xB", "0xC", "0xD", "0xE"],
            ["0xA", "0xA", "0xA", "0xB", "0xC", "0xD"],
            ["0xA", "0xA", "0xA", "0xA", "0xA", "0xB"],
            ["0xA"] * 6,
        ]
        costs = [effective_censorship_cost(make_records(values, b), 6, 1) for b in layouts]
        assert [c.raw_cost for c in costs] == [210] * 5

        costs.sort(key=lambda c: c.alpha)
        effective = [c.effective_cost for c in costs]
        assert effective == sorted(effective, reverse=True)

    def test_exact_with_large_values(self) -> None:
        """(1 − α) × C точно для значений больше 2^64"""
        records = make_records([2**70, 2**70, 2**70], ["0xA", "0xB", "0xC"])
        cost = effective_censorship_cost(records, 3, 1)
        assert cost.effective_cost == Decimal(2 * 2**70)

    def test_insufficient_data_propagates(self, two_builders) -> None:
        with pytest.raises(InsufficientData):
            effective_censorship_cost(two_builders, 5, 1)


class TestAttackerProfit:
    """Тесты для attacker_profit"""

    def test_profit_formula(self, two_builders) -> None:
        params = ProfitParameters(tvl=Decimal(2000), success_probability=0.5, duration=4, cartel_size=1)
        result = attacker_profit(two_builders, params)

        assert result.expected_revenue == Decimal(1000)
        assert result.effective_cost == Decimal(500)
        assert result.profit == Decimal(500)
        assert result.is_profitable()
        assert result.raw_cost == 1000
        assert result.alpha == 0.5

    def test_zero_probability_means_pure_cost(self, two_builders) -> None:
        params = ProfitParameters(tvl=Decimal(10**30), success_probability=0.0, duration=4, cartel_size=1)
        result = attacker_profit(two_builders, params)
        assert result.profit == Decimal(-500)
        assert not result.is_profitable()

    def test_decimal_probability_exact(self, two_builders) -> None:
        """0.1 × 10 000 = 1000 точно (без двоичных артефактов)"""
        params = ProfitParameters(tvl=Decimal(10_000), success_probability=0.1, duration=4, cartel_size=1)
        assert attacker_profit(two_builders, params).expected_revenue == Decimal(1000)

    @pytest.mark.parametrize("probability", [-0.1, 1.1])
    def test_invalid_probability(self, two_builders, probability) -> None:
        params = ProfitParameters(tvl=Decimal(1), success_probability=probability, duration=4, cartel_size=1)
        with pytest.raises(InvalidParameter, match="success_probability"):
            attacker_profit(two_builders, params)

    def test_negative_tvl(self, two_builders) -> None:
        params = ProfitParameters(tvl=Decimal(-1), success_probability=0.5, duration=4, cartel_size=1)
        with pytest.raises(InvalidParameter, match="tvl"):
            attacker_profit(two_builders, params)

    def test_invalid_cartel_size(self, two_builders) -> None:
        params = ProfitParameters(tvl=Decimal(1), success_probability=0.5, duration=4, cartel_size=0)
        with pytest.raises(InvalidParameter, match="cartel_size"):
            attacker_profit(two_builders, params)


class TestBreakeven:
    """Тесты для breakeven_tvl и breakeven_analysis"""

    def test_breakeven_value(self, two_builders) -> None:
        """V* = C_eff / p = 500 / 0.5"""
        assert breakeven_tvl(two_builders, 0.5, 4, 1) == Decimal(1000)

    def test_monopoly_breakeven_zero(self, monopoly) -> None:
        for p in (0.01, 0.5, 1.0):
            assert breakeven_tvl(monopoly, p, 4, 1) == 0

    def test_zero_probability_rejected(self, two_builders) -> None:
        with pytest.raises(InvalidParameter, match="> 0"):
            breakeven_tvl(two_builders, 0.0, 4, 1)

    def test_probability_above_one_rejected(self, two_builders) -> None:
        with pytest.raises(InvalidParameter):
            breakeven_tvl(two_builders, 1.5, 4, 1)

    @pytest.mark.parametrize("probability", [0.01, 0.1, 0.3, 0.8, 1.0])
    def test_inverse_relationship(self, mainnet_like, probability) -> None:
        """profit(V*(p), p) ≈ 0"""
        breakeven = breakeven_tvl(mainnet_like, probability, 10, 2)
        params = ProfitParameters(
            tvl=breakeven, success_probability=probability, duration=10, cartel_size=2
        )
        assert attacker_profit(mainnet_like, params).is_breakeven()

    def test_analysis_margin(self, two_builders) -> None:
        """V=2000, V*=1000 → маржа 50%"""
        analysis = breakeven_analysis(two_builders, 0.5, 4, 1, 2000)
        assert analysis.breakeven_tvl == Decimal(1000)
        assert analysis.effective_cost == Decimal(500)
        assert analysis.profit_margin_pct == pytest.approx(50.0)

    def test_analysis_negative_margin(self, two_builders) -> None:
        analysis = breakeven_analysis(two_builders, 0.5, 4, 1, 500)
        assert analysis.profit_margin_pct == pytest.approx(-100.0)

    def test_analysis_zero_tvl(self, two_builders) -> None:
        assert breakeven_analysis(two_builders, 0.5, 4, 1, 0).profit_margin_pct == 0.0

    def test_analysis_negative_tvl(self, two_builders) -> None:
        with pytest.raises(InvalidParameter, match="current_tvl"):
            breakeven_analysis(two_builders, 0.5, 4, 1, -1)


class TestSweepProbability:
    """Тесты для sweep_probability"""

    def test_strictly_increasing_profit(self, mainnet_like) -> None:
        """[0.1, 1.0], 10 шагов → прибыль строго растёт"""
        results = sweep_probability(mainnet_like, 100 * ETH, 10, 2, 0.1, 1.0, 10)

        assert len(results) == 10
        profits = [r.profit for r in results]
        assert all(a < b for a, b in zip(profits, profits[1:]))

    def test_grid_points(self, mainnet_like) -> None:
        results = sweep_probability(mainnet_like, ETH, 10, 2, 0.1, 1.0, 10)
        probabilities = [r.success_probability for r in results]

        assert probabilities[0] == 0.1
        assert probabilities[-1] == 1.0
        assert probabilities == pytest.approx([0.1 * i for i in range(1, 11)])

    def test_single_step_is_min(self, mainnet_like) -> None:
        results = sweep_probability(mainnet_like, ETH, 10, 2, 0.3, 0.9, 1)
        assert len(results) == 1
        assert results[0].success_probability == 0.3

    def test_degenerate_range(self, mainnet_like) -> None:
        results = sweep_probability(mainnet_like, ETH, 10, 2, 0.5, 0.5, 3)
        assert [r.success_probability for r in results] == [0.5, 0.5, 0.5]

    def test_shared_effective_cost(self, mainnet_like) -> None:
        results = sweep_probability(mainnet_like, ETH, 10, 2, 0.1, 1.0, 5)
        assert len({r.effective_cost for r in results}) == 1

    def test_inverted_bounds(self, mainnet_like) -> None:
        with pytest.raises(InvalidParameter, match="min_p"):
            sweep_probability(mainnet_like, ETH, 10, 2, 0.9, 0.1, 5)

    def test_out_of_range_bounds(self, mainnet_like) -> None:
        with pytest.raises(InvalidParameter, match="max_p"):
            sweep_probability(mainnet_like, ETH, 10, 2, 0.1, 1.5, 5)

    @pytest.mark.parametrize("steps", [0, -3])
    def test_non_positive_steps(self, mainnet_like, steps) -> None:
        with pytest.raises(InvalidParameter, match="steps"):
            sweep_probability(mainnet_like, ETH, 10, 2, 0.1, 1.0, steps)
