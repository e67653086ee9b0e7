"""
censorcost — экономика цензуры транзакций в PBS-аукционе блоков.

Пакет превращает упорядоченную последовательность слотов (winning bid +
builder) в оценки стоимости цензуры, коэффициент концентрации билдеров,
модель прибыли/безубыточности атакующего и стохастические сводки.
"""

__version__ = "0.3.0"
