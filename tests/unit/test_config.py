"""
Тесты для загрузки конфигурации

Проверяет:
1. Значения по умолчанию
2. Загрузку YAML с вложенными секциями
3. Подстановку ${VAR} / ${VAR:default} из окружения
4. Ошибки: неизвестные ключи, неверные типы, отсутствующие переменные
"""

import pytest

from censorcost.config import AnalysisConfig, config_from_mapping, load_config, resolve_env
from censorcost.core.errors import InvalidParameter
from censorcost.engines.monte_carlo import MonteCarloConfig
from censorcost.engines.statistics import StatisticsConfig


class TestDefaults:
    """Тесты значений по умолчанию"""

    def test_no_path_returns_defaults(self) -> None:
        config = load_config(None)
        assert config == AnalysisConfig()
        assert config.duration == 1800
        assert config.price == 3500.0
        assert config.success_probability == 0.8
        assert config.simulations == 10_000
        assert config.statistics == StatisticsConfig()
        assert config.monte_carlo == MonteCarloConfig()

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == AnalysisConfig()


class TestLoadConfig:
    """Тесты загрузки YAML"""

    def test_full_file(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "analysis:\n"
            "  duration: 600\n"
            "  cartel_size: 5\n"
            "  tvl: 1e9\n"
            "  seed: 42\n"
            "statistics:\n"
            "  percentiles: [50, 90]\n"
            "monte_carlo:\n"
            "  batch_size: 500\n",
            encoding="utf-8",
        )
        config = load_config(path)

        assert config.duration == 600
        assert config.cartel_size == 5
        assert config.tvl == 1e9
        assert config.seed == 42
        assert config.statistics.percentiles == (50.0, 90.0)
        assert config.monte_carlo.batch_size == 500
        assert config.monte_carlo.duration_step == 300

    def test_env_resolution(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CENSORCOST_PRICE", "4200")
        monkeypatch.delenv("CENSORCOST_SEED", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "analysis:\n"
            "  price: ${CENSORCOST_PRICE}\n"
            "  seed: ${CENSORCOST_SEED:7}\n",
            encoding="utf-8",
        )
        config = load_config(path)

        assert config.price == 4200.0
        assert config.seed == 7

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("analysis: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidParameter, match="invalid YAML"):
            load_config(path)


class TestResolveEnv:
    """Тесты для resolve_env"""

    def test_default_used(self, monkeypatch) -> None:
        monkeypatch.delenv("CENSORCOST_MISSING", raising=False)
        assert resolve_env("x: ${CENSORCOST_MISSING:abc}") == "x: abc"

    def test_env_overrides_default(self, monkeypatch) -> None:
        monkeypatch.setenv("CENSORCOST_SET", "1")
        assert resolve_env("${CENSORCOST_SET:2}") == "1"

    def test_missing_variable(self, monkeypatch) -> None:
        monkeypatch.delenv("CENSORCOST_MISSING", raising=False)
        with pytest.raises(InvalidParameter, match="CENSORCOST_MISSING"):
            resolve_env("${CENSORCOST_MISSING}")


class TestConfigFromMapping:
    """Тесты для config_from_mapping"""

    def test_unknown_section(self) -> None:
        with pytest.raises(InvalidParameter, match="unknown config sections: clickhouse"):
            config_from_mapping({"clickhouse": {}})

    def test_unknown_key(self) -> None:
        with pytest.raises(InvalidParameter, match="window"):
            config_from_mapping({"analysis": {"window": 10}})

    @pytest.mark.parametrize(
        "analysis",
        [{"duration": "long"}, {"duration": 1.5}, {"cartel_size": True}, {"price": "cheap"}],
    )
    def test_wrong_types(self, analysis) -> None:
        with pytest.raises(InvalidParameter, match="analysis\\."):
            config_from_mapping({"analysis": analysis})

    def test_section_must_be_mapping(self) -> None:
        with pytest.raises(InvalidParameter, match="must be a mapping"):
            config_from_mapping({"analysis": [1, 2]})

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"monte_carlo": {"batch_size": 0}}, "batch_size"),
            ({"monte_carlo": {"batch_size": -1}}, "batch_size"),
            ({"monte_carlo": {"duration_step": 0}}, "duration_step"),
            ({"statistics": {"percentiles": [150]}}, "percentile"),
            ({"statistics": {"unit_scale": 0}}, "unit_scale"),
        ],
    )
    def test_out_of_range_values(self, data, match) -> None:
        """Значения вне диапазона отклоняются при загрузке, а не в движке"""
        with pytest.raises(InvalidParameter, match=match):
            config_from_mapping(data)

    def test_out_of_range_in_file(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("monte_carlo:\n  batch_size: 0\n", encoding="utf-8")
        with pytest.raises(InvalidParameter, match="batch_size"):
            load_config(path)

    def test_null_seed(self) -> None:
        assert config_from_mapping({"analysis": {"seed": None}}).seed is None
