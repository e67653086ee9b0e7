"""
Errors — Типизированная таксономия ошибок движков

Все ошибки возвращаются синхронно вызывающему коду и никогда не ретраятся
внутри ядра: каждая функция детерминирована, повтор с теми же аргументами
даёт тот же результат.

Иерархия:
    CensorshipAnalysisError
    ├── InsufficientData       — записей меньше, чем запрошенная длительность
    ├── MissingValue           — bid отсутствует или не парсится
    ├── EmptyDataset           — ноль записей там, где нужна хотя бы одна
    ├── InvalidParameter       — параметр вне допустимого диапазона
    ├── InternalInconsistency  — нарушен производный инвариант (дефект кода)
    ├── SimulationCancelled    — Monte-Carlo прерван внешним сигналом/таймаутом
    └── RelayParseError        — невалидный relay payload
"""


class CensorshipAnalysisError(Exception):
    """Базовый класс всех ошибок censorcost."""

    pass


class InsufficientData(CensorshipAnalysisError):
    """
    Недостаточно записей для запрошенной длительности.

    Возникает, когда len(records) < duration.
    """

    pass


class MissingValue(CensorshipAnalysisError):
    """Значение bid отсутствует (None) или не может быть распарсено."""

    pass


class EmptyDataset(CensorshipAnalysisError):
    """Пустой набор записей там, где требуется хотя бы одна."""

    pass


class InvalidParameter(CensorshipAnalysisError, ValueError):
    """
    Параметр вне допустимого диапазона.

    Наследует ValueError, чтобы оставаться совместимым с кодом, который
    ловит стандартные ошибки валидации.
    """

    pass


class InternalInconsistency(CensorshipAnalysisError):
    """
    Нарушен производный инвариант (например, alpha ∉ [0, 1]).

    Указывает на дефект в коде, а не на некорректный ввод.
    """

    pass


class SimulationCancelled(CensorshipAnalysisError):
    """Monte-Carlo симуляция прервана cancel_event или по таймауту."""

    pass


class RelayParseError(CensorshipAnalysisError):
    """Relay bid trace не соответствует контракту или файл повреждён."""

    pass
