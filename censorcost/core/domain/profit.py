"""
Profit — Параметры и результат модели прибыли атакующего

ProfitParameters — входные предположения (TVL, вероятность успеха,
длительность цензуры, размер картеля). Модель несёт только типы: семантика
диапазонов проверяется ProfitEngine и сообщается как InvalidParameter.

ProfitResult — производный снимок, не меняется после создания.

Единицы: tvl, effective_cost, expected_revenue и profit — в wei.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


# =============================================================================
# PROFIT PARAMETERS
# =============================================================================


class ProfitParameters(BaseModel):
    """
    Предположения модели прибыли.

    success_probability всегда внешнее предположение, движок её не выводит.
    """

    tvl: Decimal = Field(..., description="Value-at-risk (wei)")
    success_probability: float = Field(..., description="Предполагаемая вероятность успеха")
    duration: int = Field(..., description="Длительность цензуры τ (слоты)")
    cartel_size: int = Field(..., description="Размер картеля k (top-k билдеров)")

    model_config = {"frozen": True}


# =============================================================================
# PROFIT RESULT
# =============================================================================


class ProfitResult(BaseModel):
    """
    Результат модели прибыли.

    profit = success_probability × tvl − effective_cost

    Immutable модель (frozen=True).
    """

    expected_revenue: Decimal = Field(..., description="success_probability × tvl (wei)")
    effective_cost: Decimal = Field(..., description="(1 − alpha) × raw_cost (wei)")
    profit: Decimal = Field(..., description="expected_revenue − effective_cost (wei)")
    alpha: float = Field(..., ge=0, le=1, description="Коэффициент концентрации top-k")
    success_probability: float = Field(..., ge=0, le=1)
    tvl: Decimal = Field(..., ge=0, description="Value-at-risk (wei)")

    raw_cost: int = Field(..., ge=0, description="Сырая стоимость цензуры (wei)")
    duration: int = Field(..., ge=0)
    cartel_size: int = Field(..., ge=1)

    model_config = {"frozen": True}

    def is_profitable(self) -> bool:
        """
        Проверка, положительна ли ожидаемая прибыль.

        Returns:
            True если profit > 0
        """
        return self.profit > 0

    def is_breakeven(self, tolerance: Decimal = Decimal("1e-6")) -> bool:
        """
        Проверка, находится ли атака в точке безубыточности.

        Args:
            tolerance: Допуск (wei)

        Returns:
            True если |profit| <= tolerance
        """
        return abs(self.profit) <= tolerance
