"""
Configuration — Параметры анализа по умолчанию и загрузка YAML

Структура YAML файла (все секции и ключи опциональны):

    analysis:
      duration: 1800
      cartel_size: 3
      success_probability: 0.8
      price: 3500
      tvl: 500000000
      window_size: 1000
      smoothing: 0.1
      simulations: 10000
      seed: ${CENSORCOST_SEED:42}
    statistics:
      percentiles: [25, 50, 75, 95, 99]
    monte_carlo:
      batch_size: 10000
      duration_step: 300

Значения вида ${VAR} и ${VAR:default} подставляются из окружения до
парсинга YAML. Неизвестные секции и ключи → InvalidParameter.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable

import yaml

from censorcost.core.errors import InvalidParameter
from censorcost.engines.monte_carlo import MonteCarloConfig
from censorcost.engines.statistics import StatisticsConfig

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class AnalysisConfig:
    """Параметры анализа по умолчанию (TVL и price в display-валюте)."""

    duration: int = 1800  # τ, слоты (6 часов)
    cartel_size: int = 3
    success_probability: float = 0.8
    price: float = 3500.0  # курс ETH в USD
    tvl: float = 500_000_000.0  # USD
    window_size: int = 1000
    smoothing: float = 0.1
    simulations: int = 10_000
    workers: int = 1
    seed: int | None = None

    # Поиск оптимальной длительности
    max_duration: int = 7200
    decay_constant: float = 3600.0

    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    monte_carlo: MonteCarloConfig = field(default_factory=MonteCarloConfig)


# =============================================================================
# ENV RESOLUTION
# =============================================================================


def resolve_env(raw: str) -> str:
    """
    Подстановка ${VAR} / ${VAR:default} из окружения.

    Raises:
        InvalidParameter: Если переменная не задана и default отсутствует
    """

    def _resolve(match):
        expr = match.group(1)
        if ":" in expr:
            var_name, _, default = expr.partition(":")
            return os.environ.get(var_name, default)
        if expr not in os.environ:
            raise InvalidParameter(f"environment variable {expr} is not set")
        return os.environ[expr]

    return _ENV_PATTERN.sub(_resolve, raw)


# =============================================================================
# COERCION
# =============================================================================


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    try:
        result = int(str(value), 10) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be an integer, got {value!r}") from e
    if isinstance(value, float) and result != value:
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    return result


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from e


def _as_optional_int(value: Any, name: str) -> int | None:
    return None if value is None else _as_int(value, name)


def _as_percentiles(value: Any, name: str) -> tuple[float, ...]:
    if not isinstance(value, (list, tuple)):
        raise InvalidParameter(f"{name} must be a list, got {value!r}")
    return tuple(_as_float(item, f"{name}[{i}]") for i, item in enumerate(value))


_ANALYSIS_FIELDS: dict[str, Callable[[Any, str], Any]] = {
    "duration": _as_int,
    "cartel_size": _as_int,
    "success_probability": _as_float,
    "price": _as_float,
    "tvl": _as_float,
    "window_size": _as_int,
    "smoothing": _as_float,
    "simulations": _as_int,
    "workers": _as_int,
    "seed": _as_optional_int,
    "max_duration": _as_int,
    "decay_constant": _as_float,
}

_STATISTICS_FIELDS: dict[str, Callable[[Any, str], Any]] = {
    "unit_scale": _as_int,
    "percentiles": _as_percentiles,
}

_MONTE_CARLO_FIELDS: dict[str, Callable[[Any, str], Any]] = {
    "batch_size": _as_int,
    "duration_step": _as_int,
}


def _coerce_section(section: str, values: Any, schema: dict[str, Callable[[Any, str], Any]]) -> dict:
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise InvalidParameter(f"config section '{section}' must be a mapping")

    unknown = sorted(set(values) - set(schema))
    if unknown:
        raise InvalidParameter(f"unknown keys in config section '{section}': {', '.join(map(str, unknown))}")

    return {key: schema[key](value, f"{section}.{key}") for key, value in values.items()}


# =============================================================================
# LOADING
# =============================================================================


def config_from_mapping(data: dict | None) -> AnalysisConfig:
    """
    Построение AnalysisConfig из распарсенного YAML.

    Raises:
        InvalidParameter: Неизвестная секция/ключ или значение не того типа
    """
    data = data or {}
    if not isinstance(data, dict):
        raise InvalidParameter("config root must be a mapping")

    unknown = sorted(set(data) - {"analysis", "statistics", "monte_carlo"})
    if unknown:
        raise InvalidParameter(f"unknown config sections: {', '.join(map(str, unknown))}")

    analysis = _coerce_section("analysis", data.get("analysis"), _ANALYSIS_FIELDS)
    statistics = _coerce_section("statistics", data.get("statistics"), _STATISTICS_FIELDS)
    monte_carlo = _coerce_section("monte_carlo", data.get("monte_carlo"), _MONTE_CARLO_FIELDS)

    return AnalysisConfig(
        **analysis,
        statistics=replace(StatisticsConfig(), **statistics),
        monte_carlo=replace(MonteCarloConfig(), **monte_carlo),
    )


def load_config(path: str | Path | None = None) -> AnalysisConfig:
    """Load config with environment variable resolution.

    Без path возвращаются значения по умолчанию.
    """
    if path is None:
        return AnalysisConfig()

    with open(path, encoding="utf-8") as f:
        raw = f.read()

    try:
        data = yaml.safe_load(resolve_env(raw))
    except yaml.YAMLError as e:
        raise InvalidParameter(f"{path}: invalid YAML: {e}") from e

    return config_from_mapping(data)
