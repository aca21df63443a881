# tests/test_config.py
"""
Unit tests for settings, calculator configs and logging helpers
Run with: pytest tests/test_config.py -v
"""

import json

import pytest
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

import quantcore
from quantcore.backtesting import BacktestEngine
from quantcore.config import (
    AnalyzerConfig,
    BacktestConfig,
    RiskScorerConfig,
    Settings,
    SimulationConfig,
    get_logger,
    log_exceptions,
    setup_logging,
    timed_operation,
)
from quantcore.simulation import MonteCarloSimulator


class TestSettings:
    """Tests for application settings"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.APP_NAME == "quantcore"
        assert settings.RISK_FREE_RATE == 0.02
        assert settings.DEFAULT_NUM_SIMULATIONS == 1000
        assert settings.is_development

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_NUM_SIMULATIONS", "250")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.DEFAULT_NUM_SIMULATIONS == 250
        assert settings.LOG_LEVEL == "DEBUG"

    def test_invalid_values(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, VAR_CONFIDENCE_LEVEL=1.5)
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, ENVIRONMENT="qa")


class TestCalculatorConfigs:
    """Tests for the explicit calculator configuration objects"""

    def test_component_weights_sum_to_one(self):
        assert sum(RiskScorerConfig().component_weights.values()) == pytest.approx(1.0)

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            RISK_FREE_RATE=0.04,
            VAR_CONFIDENCE_LEVEL=0.99,
            DEFAULT_INITIAL_CAPITAL=50000,
            DEFAULT_HORIZON_DAYS=21,
        )

        assert AnalyzerConfig.from_settings(settings).risk_free_rate == 0.04
        assert SimulationConfig.from_settings(settings).confidence_level == 0.99
        assert SimulationConfig.from_settings(settings).default_horizon_days == 21
        assert SimulationConfig.from_settings(settings).risk_free_rate == 0.04
        assert BacktestConfig.from_settings(settings).initial_capital == 50000

    def test_seeded_calculators_from_settings(self):
        settings = Settings(_env_file=None, RANDOM_SEED=11, DEFAULT_HORIZON_DAYS=10)

        first = MonteCarloSimulator.from_settings(settings).simulate({}, num_simulations=20)
        second = MonteCarloSimulator.from_settings(settings).simulate({}, num_simulations=20)

        assert first.horizon_days == 10
        assert first.expected_value == second.expected_value

        engine = BacktestEngine.from_settings(settings)
        assert engine.run(None, "buy_and_hold").synthetic_data

    def test_configs_are_immutable(self):
        config = SimulationConfig()
        with pytest.raises(AttributeError):
            config.jump_probability = 0.5


class TestLoggingHelpers:
    """Tests for loguru helpers"""

    @pytest.fixture
    def messages(self):
        records = []
        handler_id = logger.add(records.append, level="DEBUG", format="{message}")
        yield records
        logger.remove(handler_id)

    def test_timed_operation(self, messages):
        with timed_operation("unit of work") as op:
            pass

        assert op.duration >= 0
        assert any("unit of work" in str(m) for m in messages)

    def test_log_exceptions_reraises(self, messages):
        @log_exceptions()
        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            fail()
        assert any("boom" in str(m) for m in messages)

    def test_get_logger_binds_name(self, messages):
        get_logger("risk").info("bound")
        assert messages[-1].record["extra"]["name"] == "risk"

    def test_setup_logging_json_file(self, tmp_path):
        log_file = tmp_path / "logs" / "quantcore.log"
        settings = Settings(_env_file=None)

        setup_logging(log_level="INFO", log_file=log_file, json_logs=True, settings=settings)
        logger.info("written to file")
        logger.complete()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert any(entry["message"] == "written to file" for entry in lines)
        assert all(entry["level"] == "INFO" for entry in lines)

        logger.remove()


def test_version():
    assert quantcore.get_version() == "1.0.0"
    assert quantcore.get_package_info()["name"] == "quantcore"
