"""Tests for core project setup, configuration and logging."""

import json
import logging
import os
from unittest.mock import patch

import numpy as np
import pytest

from realty_risk.common.interfaces import BenchmarkReturnProvider
from realty_risk.common.config import (
    Config, ConfigManager, ConfigurationError, LoggingConfig, RiskConfig
)
from realty_risk.common.logging import (
    JSONFormatter, correlation_context, get_correlation_id, get_logger,
    log_execution_time, setup_logging
)


def test_interfaces_are_abstract():
    """Test that core interfaces are properly abstract."""
    with pytest.raises(TypeError):
        BenchmarkReturnProvider()


def test_interface_subclass():
    """Test a concrete provider only needs get_returns."""
    class FlatProvider(BenchmarkReturnProvider):
        def get_returns(self, periods):
            return np.zeros(periods)

    assert len(FlatProvider().get_returns(6)) == 6


def test_config_defaults():
    """Test that configuration has sensible defaults."""
    config = Config()

    assert config.risk.risk_free_rate_annual == 0.02
    assert config.risk.market_return_annual == 0.08
    assert config.risk.trailing_months == 12
    assert config.risk.var_confidence == 0.05
    assert config.risk.benchmark_seed is None
    assert config.risk.rebalance_threshold == 0.05
    assert config.risk.parallel_execution is True

    assert config.logging.level == "INFO"
    assert config.logging.format == "text"


def test_risk_config_validation():
    """Test invalid risk settings are rejected at construction."""
    with pytest.raises(ValueError, match="trailing_months"):
        RiskConfig(trailing_months=1)

    with pytest.raises(ValueError, match="var_confidence"):
        RiskConfig(var_confidence=0.5)

    with pytest.raises(ValueError, match="rebalance_threshold"):
        RiskConfig(rebalance_threshold=0)


def test_logging_config_normalizes_values():
    config = LoggingConfig(level="debug", format="JSON")

    assert config.level == "DEBUG"
    assert config.format == "json"

    with pytest.raises(ValueError, match="Invalid log level"):
        LoggingConfig(level="verbose")


def test_config_manager_env_loading():
    """Test that ConfigManager loads from environment variables."""
    with patch.dict(os.environ, {
        'RISK_FREE_RATE': '0.03',
        'TRAILING_MONTHS': '24',
        'BENCHMARK_SEED': '7',
        'PARALLEL_EXECUTION': 'false',
        'LOG_LEVEL': 'DEBUG'
    }):
        config = ConfigManager(auto_discover=False).load_config()

        assert config.risk.risk_free_rate_annual == 0.03
        assert config.risk.trailing_months == 24
        assert config.risk.benchmark_seed == 7
        assert config.risk.parallel_execution is False
        assert config.logging.level == 'DEBUG'


def test_config_manager_ignores_unparseable_env():
    """Test values that cannot be converted fall back to defaults."""
    with patch.dict(os.environ, {'TRAILING_MONTHS': 'twelve'}):
        config = ConfigManager(auto_discover=False).load_config()

        assert config.risk.trailing_months == 12


def test_config_validation():
    """Test configuration validation wraps invalid values."""
    with patch.dict(os.environ, {'VAR_CONFIDENCE': '0.9'}):
        with pytest.raises(ConfigurationError, match="var_confidence"):
            ConfigManager(auto_discover=False).load_config()


def test_config_file_yaml(tmp_path):
    """Test YAML file values are loaded and overridden by the environment."""
    config_file = tmp_path / "realty_risk.yaml"
    config_file.write_text(
        "risk:\n"
        "  market_return_annual: 0.06\n"
        "  benchmark_seed: 11\n"
        "logging:\n"
        "  format: json\n"
    )

    with patch.dict(os.environ, {'MARKET_RETURN': '0.05'}):
        config = ConfigManager(config_file=str(config_file), auto_discover=False).load_config()

    assert config.risk.market_return_annual == 0.05
    assert config.risk.benchmark_seed == 11
    assert config.logging.format == "json"


def test_config_file_json(tmp_path):
    config_file = tmp_path / "risk.json"
    config_file.write_text(json.dumps({"risk": {"trailing_months": 6}}))

    config = ConfigManager(config_file=str(config_file), auto_discover=False).load_config()

    assert config.risk.trailing_months == 6


def test_config_file_unknown_section(tmp_path):
    config_file = tmp_path / "risk.json"
    config_file.write_text(json.dumps({"broker": {"type": "alpaca"}}))

    with pytest.raises(ConfigurationError, match="Unknown configuration sections: broker"):
        ConfigManager(config_file=str(config_file), auto_discover=False).load_config()


def test_config_file_rejects_top_level_scalars(tmp_path):
    """Test only the risk and logging sections are accepted at the top level."""
    config_file = tmp_path / "risk.yaml"
    config_file.write_text("environment: staging\nrisk:\n  trailing_months: 6\n")

    with pytest.raises(ConfigurationError, match="Unknown configuration sections: environment"):
        ConfigManager(config_file=str(config_file), auto_discover=False).load_config()


def test_config_has_no_environment_settings():
    """Test ENVIRONMENT and DEBUG are not configuration inputs."""
    with patch.dict(os.environ, {'ENVIRONMENT': 'production', 'DEBUG': 'not-a-bool'}):
        config = ConfigManager(auto_discover=False).load_config()

    assert not hasattr(config, 'environment')
    assert not hasattr(config, 'debug')
    assert set(config.to_dict()) == {'risk', 'logging'}


def test_config_file_missing(tmp_path):
    manager = ConfigManager(config_file=str(tmp_path / "absent.yaml"), auto_discover=False)

    with pytest.raises(ConfigurationError, match="Config file not found"):
        manager.load_config()


def test_config_save_and_reload(tmp_path):
    """Test a saved configuration loads back unchanged."""
    saved = tmp_path / "saved.yaml"
    manager = ConfigManager(auto_discover=False)
    config = Config(risk=RiskConfig(benchmark_seed=3, trailing_months=18))

    manager.save_config(config, str(saved), format='yaml')
    loaded = ConfigManager(config_file=str(saved), auto_discover=False).load_config()

    assert loaded.risk.benchmark_seed == 3
    assert loaded.risk.trailing_months == 18


def test_logger_creation():
    """Test that loggers can be created."""
    logger = get_logger("test")
    assert logger.name == "realty_risk.test"


def test_correlation_context():
    """Test correlation context manager."""
    assert get_correlation_id() is None

    with correlation_context("test-123") as corr_id:
        assert corr_id == "test-123"
        assert get_correlation_id() == "test-123"

        with correlation_context() as inner_id:
            assert inner_id != "test-123"
            assert get_correlation_id() == inner_id

        assert get_correlation_id() == "test-123"

    assert get_correlation_id() is None


def test_json_formatter_includes_correlation_and_extra():
    record = logging.LogRecord(
        name="realty_risk.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg="analysis %s", args=("done",), exc_info=None
    )
    record.duration_seconds = 0.5

    with correlation_context("corr-1"):
        entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "analysis done"
    assert entry["level"] == "INFO"
    assert entry["correlation_id"] == "corr-1"
    assert entry["duration_seconds"] == 0.5


def test_setup_logging_writes_json_file(tmp_path):
    """Test package logs go to the configured file as JSON lines."""
    log_file = tmp_path / "risk.log"
    package_logger = logging.getLogger("realty_risk")

    try:
        setup_logging(LoggingConfig(level="DEBUG", format="json", file_path=str(log_file)))
        get_logger("engine").info("analysis started", extra={"portfolio_id": "pf-1"})

        assert package_logger.propagate is False
        for handler in package_logger.handlers:
            handler.flush()
        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["logger"] == "realty_risk.engine"
        assert entry["portfolio_id"] == "pf-1"
    finally:
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.propagate = True
        package_logger.setLevel(logging.NOTSET)


def test_log_execution_time(caplog):
    """Test the decorator logs success and re-raises failures."""
    logger = logging.getLogger("tests.timing")

    @log_execution_time(logger, "Sample operation")
    def succeed():
        return 42

    @log_execution_time(logger, "Failing operation")
    def fail():
        raise RuntimeError("boom")

    with caplog.at_level(logging.INFO, logger="tests.timing"):
        assert succeed() == 42
        with pytest.raises(RuntimeError):
            fail()

    messages = [record.getMessage() for record in caplog.records]
    assert "Sample operation completed successfully" in messages
    assert "Failing operation failed" in messages
