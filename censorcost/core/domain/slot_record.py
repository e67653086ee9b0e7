"""
SlotRecord — Модель winning bid одного слота

Immutable Pydantic модель входных данных всех движков. Записи создаются
один раз ingestion-слоем (relay parser) и далее только читаются.

Инварианты последовательности (проверяются ingestion-слоем, движки доверяют):
- Последовательность отсортирована по slot_number по возрастанию
- bid_value неотрицательный; отсутствие значения (None) — жёсткая ошибка
  для любого движка, которому нужно значение
- Пустой builder_identity нормализуется в UNKNOWN_BUILDER
"""

from typing import Any, Final

from pydantic import BaseModel, Field, field_validator

from censorcost.core.math.precision import U64_MAX

# Sentinel для пустого builder pubkey
UNKNOWN_BUILDER: Final[str] = "unknown"


# =============================================================================
# SLOT RECORD
# =============================================================================


class SlotRecord(BaseModel):
    """
    Winning bid одного слота.

    Immutable модель (frozen=True). bid_value — целое в wei произвольной
    точности (Python int), никогда не float.
    """

    slot_number: int = Field(..., ge=0, le=U64_MAX, description="Номер слота (u64)")
    bid_value: int | None = Field(
        None, ge=0, description="Winning bid в wei (None = значение отсутствует)"
    )
    builder_identity: str = Field(
        UNKNOWN_BUILDER, description="Builder pubkey (пустой → 'unknown')"
    )

    model_config = {"frozen": True}

    @field_validator("builder_identity", mode="before")
    @classmethod
    def normalize_builder_identity(cls, v: Any) -> Any:
        """Пустой или отсутствующий builder нормализуется в sentinel"""
        if v is None or v == "":
            return UNKNOWN_BUILDER
        return v

    def has_value(self) -> bool:
        """
        Проверка наличия bid value.

        Returns:
            True если bid_value не None
        """
        return self.bid_value is not None


# =============================================================================
# BUILDER STAT
# =============================================================================


class BuilderStat(BaseModel):
    """
    Статистика билдера: количество выигранных блоков в наборе записей.

    Immutable модель (frozen=True).
    """

    identity: str = Field(..., min_length=1, description="Builder pubkey")
    block_count: int = Field(..., ge=1, description="Количество блоков билдера")

    model_config = {"frozen": True}

    def share_of(self, total_blocks: int) -> float:
        """
        Доля рынка билдера.

        Args:
            total_blocks: Общее количество блоков в наборе

        Returns:
            block_count / total_blocks
        """
        return self.block_count / total_blocks
