"""
Тесты для ConcentrationEngine

Проверяет:
1. Коэффициент α для top-k билдеров
2. Порядок ранжирования и детерминизм при равенстве
3. Граничные случаи: монополия, k больше числа билдеров, пустой набор
4. Herfindahl index
"""

from fractions import Fraction

import pytest

from censorcost.core.domain import UNKNOWN_BUILDER, SlotRecord
from censorcost.core.errors import EmptyDataset, InvalidParameter
from censorcost.engines.concentration import (
    builder_counts,
    builder_diversity,
    compute_concentration,
    herfindahl_index,
    rank_builders,
    top_builders,
)


def make_records(builders):
    return [
        SlotRecord(slot_number=i + 1, bid_value=(i + 1) * 100, builder_identity=builder)
        for i, builder in enumerate(builders)
    ]


@pytest.fixture
def five_builders():
    """8 блоков: A=3, B=2, C=1, D=1, E=1"""
    return make_records(["0xA", "0xA", "0xA", "0xB", "0xB", "0xC", "0xD", "0xE"])


class TestComputeConcentration:
    """Тесты для compute_concentration"""

    def test_basic(self) -> None:
        """builder1 владеет 2 из 4 блоков → α=0.5 при k=1"""
        records = make_records(["0xbuilder1", "0xbuilder1", "0xbuilder2", "0xbuilder3"])
        result = compute_concentration(records, 1)

        assert result.alpha == 0.5
        assert result.alpha_exact == Fraction(1, 2)
        assert result.builders[0].identity == "0xbuilder1"
        assert result.builders[0].block_count == 2

    def test_top_k(self, five_builders) -> None:
        """Top 2: A + B = 5/8"""
        result = compute_concentration(five_builders, 2)

        assert result.alpha == 5 / 8
        assert result.top_k_blocks == 5
        assert result.total_blocks == 8
        assert result.unique_builders == 5
        assert [(s.identity, s.block_count) for s in result.builders[:2]] == [("0xA", 3), ("0xB", 2)]

    def test_single_builder_monopoly(self) -> None:
        """Монополия → α=1.0 для любого k ≥ 1"""
        records = make_records(["0xmonopoly"] * 3)
        for k in (1, 2, 10):
            assert compute_concentration(records, k).alpha == 1.0

    def test_two_equal_builders(self) -> None:
        """Два билдера по два блока, k=1 → α=0.5"""
        records = make_records(["0xA", "0xB", "0xA", "0xB"])
        assert compute_concentration(records, 1).alpha == 0.5

    def test_k_exceeds_builders(self, five_builders) -> None:
        """k > числа билдеров → clamp, α=1.0"""
        result = compute_concentration(five_builders, 100)
        assert result.alpha == 1.0
        assert result.cartel_size == 100
        assert result.effective_cartel_size == 5

    def test_alpha_bounds(self, five_builders) -> None:
        for k in range(1, 8):
            assert 0.0 <= compute_concentration(five_builders, k).alpha <= 1.0

    def test_alpha_non_decreasing_in_k(self, five_builders) -> None:
        alphas = [compute_concentration(five_builders, k).alpha for k in range(1, 7)]
        assert alphas == sorted(alphas)

    def test_empty_dataset(self) -> None:
        with pytest.raises(EmptyDataset):
            compute_concentration([], 1)

    @pytest.mark.parametrize("k", [0, -1])
    def test_invalid_k(self, five_builders, k) -> None:
        with pytest.raises(InvalidParameter, match="cartel_size"):
            compute_concentration(five_builders, k)

    def test_invalid_k_checked_before_empty(self) -> None:
        """Невалидный k сообщается даже для пустого набора"""
        with pytest.raises(InvalidParameter):
            compute_concentration([], 0)

    def test_unknown_builder_counted(self) -> None:
        """Пустые identity агрегируются в 'unknown'"""
        records = make_records(["", "", "0xA"])
        result = compute_concentration(records, 1)
        assert result.builders[0].identity == UNKNOWN_BUILDER
        assert result.alpha_exact == Fraction(2, 3)


class TestRanking:
    """Тесты ранжирования билдеров"""

    def test_ties_broken_by_identity(self) -> None:
        """При равном числе блоков — identity по возрастанию"""
        records = make_records(["0xC", "0xA", "0xB"])
        assert [s.identity for s in rank_builders(records)] == ["0xA", "0xB", "0xC"]

    def test_ranking_independent_of_input_order(self) -> None:
        forward = make_records(["0xB", "0xA", "0xB", "0xA", "0xC"])
        backward = make_records(list(reversed(["0xB", "0xA", "0xB", "0xA", "0xC"])))
        assert rank_builders(forward) == rank_builders(backward)

    def test_top_builders_at_tie_boundary(self) -> None:
        """Выбор top-k на границе равенства детерминирован"""
        records = make_records(["0xA", "0xA", "0xZ", "0xM"])
        assert [s.identity for s in top_builders(records, 2)] == ["0xA", "0xM"]

    def test_counts_and_diversity(self, five_builders) -> None:
        counts = builder_counts(five_builders)
        assert counts["0xA"] == 3
        assert sum(counts.values()) == 8
        assert builder_diversity(five_builders) == 5

    def test_rank_empty(self) -> None:
        assert rank_builders([]) == []
        assert builder_diversity([]) == 0


class TestHerfindahlIndex:
    """Тесты для herfindahl_index"""

    def test_monopoly(self) -> None:
        assert herfindahl_index(make_records(["0xA"] * 4)) == 1.0

    def test_equal_shares(self) -> None:
        """4 равных билдера → 4 × (1/4)² = 0.25"""
        assert herfindahl_index(make_records(["0xA", "0xB", "0xC", "0xD"])) == pytest.approx(0.25)

    def test_mixed(self, five_builders) -> None:
        expected = (9 + 4 + 1 + 1 + 1) / 64
        assert herfindahl_index(five_builders) == pytest.approx(expected)

    def test_empty(self) -> None:
        with pytest.raises(EmptyDataset):
            herfindahl_index([])
