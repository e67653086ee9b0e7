"""
Тесты для доменных моделей: SlotRecord, BuilderStat, ProfitParameters, ProfitResult

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Нормализацию пустого builder identity
3. Immutability (frozen=True)
4. Произвольную точность bid_value
5. Бизнес-логику ProfitResult (прибыльность, безубыточность)
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from censorcost.core.domain import (
    UNKNOWN_BUILDER,
    BuilderStat,
    ProfitParameters,
    ProfitResult,
    SlotRecord,
)
from censorcost.core.math.precision import U64_MAX


# =============================================================================
# SLOT RECORD TESTS
# =============================================================================


class TestSlotRecord:
    """Тесты для модели SlotRecord"""

    def test_valid_record(self) -> None:
        record = SlotRecord(slot_number=8_000_000, bid_value=10**17, builder_identity="0xabc")
        assert record.slot_number == 8_000_000
        assert record.bid_value == 10**17
        assert record.builder_identity == "0xabc"
        assert record.has_value()

    def test_missing_value_allowed(self) -> None:
        """bid_value может отсутствовать (ошибка возникает в движке)"""
        record = SlotRecord(slot_number=1)
        assert record.bid_value is None
        assert not record.has_value()

    @pytest.mark.parametrize("identity", [None, ""])
    def test_empty_builder_normalized(self, identity) -> None:
        """Пустой builder → 'unknown'"""
        record = SlotRecord(slot_number=1, bid_value=1, builder_identity=identity)
        assert record.builder_identity == UNKNOWN_BUILDER

    def test_default_builder_is_unknown(self) -> None:
        assert SlotRecord(slot_number=1, bid_value=1).builder_identity == UNKNOWN_BUILDER

    def test_bid_value_beyond_u64(self) -> None:
        """bid_value — целое произвольной точности"""
        record = SlotRecord(slot_number=1, bid_value=2**200)
        assert record.bid_value == 2**200

    def test_negative_bid_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SlotRecord(slot_number=1, bid_value=-1)

    def test_slot_bounds(self) -> None:
        """slot_number ∈ [0, 2^64 − 1]"""
        assert SlotRecord(slot_number=U64_MAX, bid_value=0).slot_number == U64_MAX
        with pytest.raises(ValidationError):
            SlotRecord(slot_number=U64_MAX + 1, bid_value=0)
        with pytest.raises(ValidationError):
            SlotRecord(slot_number=-1, bid_value=0)

    def test_immutability(self) -> None:
        record = SlotRecord(slot_number=1, bid_value=1)
        with pytest.raises(ValidationError):
            record.bid_value = 2


# =============================================================================
# BUILDER STAT TESTS
# =============================================================================


class TestBuilderStat:
    """Тесты для модели BuilderStat"""

    def test_share_of(self) -> None:
        stat = BuilderStat(identity="0xA", block_count=3)
        assert stat.share_of(8) == pytest.approx(0.375)

    def test_zero_blocks_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BuilderStat(identity="0xA", block_count=0)

    def test_empty_identity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BuilderStat(identity="", block_count=1)


# =============================================================================
# PROFIT MODEL TESTS
# =============================================================================


class TestProfitParameters:
    """Тесты для модели ProfitParameters"""

    def test_carries_out_of_range_values(self) -> None:
        """Модель несёт только типы; диапазоны проверяет движок"""
        params = ProfitParameters(tvl=Decimal(-1), success_probability=1.5, duration=0, cartel_size=0)
        assert params.success_probability == 1.5

    def test_immutability(self) -> None:
        params = ProfitParameters(tvl=Decimal(1), success_probability=0.5, duration=1, cartel_size=1)
        with pytest.raises(ValidationError):
            params.duration = 2


class TestProfitResult:
    """Тесты для модели ProfitResult"""

    def _result(self, profit: Decimal) -> ProfitResult:
        return ProfitResult(
            expected_revenue=Decimal(100) + profit,
            effective_cost=Decimal(100),
            profit=profit,
            alpha=0.5,
            success_probability=0.5,
            tvl=Decimal(400),
            raw_cost=200,
            duration=4,
            cartel_size=1,
        )

    def test_profitable(self) -> None:
        assert self._result(Decimal(1)).is_profitable()
        assert not self._result(Decimal(0)).is_profitable()
        assert not self._result(Decimal(-1)).is_profitable()

    def test_breakeven(self) -> None:
        assert self._result(Decimal(0)).is_breakeven()
        assert self._result(Decimal("1e-7")).is_breakeven()
        assert not self._result(Decimal(1)).is_breakeven()

    def test_alpha_bounds_enforced(self) -> None:
        with pytest.raises(ValidationError):
            ProfitResult(
                expected_revenue=Decimal(0),
                effective_cost=Decimal(0),
                profit=Decimal(0),
                alpha=1.5,
                success_probability=0.5,
                tvl=Decimal(0),
                raw_cost=0,
                duration=0,
                cartel_size=1,
            )
