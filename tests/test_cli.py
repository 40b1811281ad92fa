"""Tests for the realty-risk command-line interface."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from realty_risk.cli import load_portfolio, main


PORTFOLIO_DOCUMENT = {
    "id": "pf-cli",
    "name": "Two flats",
    "totalValue": 1000000,
    "properties": [
        {"propertyId": "prop-a", "currentValue": 500000, "totalReturnPercentage": 8.0},
        {"propertyId": "prop-b", "currentValue": 500000, "totalReturnPercentage": -2.0},
    ],
    "currentAllocation": {"residential": 0.6, "commercial": 0.4},
}


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep CLI runs from reconfiguring package logging."""
    with patch("realty_risk.cli.setup_logging"):
        yield


@pytest.fixture(autouse=True)
def clean_environment(tmp_path, monkeypatch):
    """Run without a discoverable config file or risk overrides."""
    monkeypatch.chdir(tmp_path)
    for env_var in ("TRAILING_MONTHS", "BENCHMARK_SEED", "VAR_CONFIDENCE", "PARALLEL_EXECUTION"):
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def portfolio_file(tmp_path):
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps(PORTFOLIO_DOCUMENT))
    return str(path)


def test_load_portfolio_yaml(tmp_path):
    path = tmp_path / "portfolio.yaml"
    path.write_text(
        "id: pf-yaml\n"
        "totalValue: 250000\n"
        "properties:\n"
        "  - propertyId: p-1\n"
        "    currentValue: 250000\n"
        "currentAllocation:\n"
        "  land: 1.0\n"
    )

    portfolio = load_portfolio(str(path))

    assert portfolio.id == "pf-yaml"
    assert portfolio.current_allocation.land == 1.0


def test_analyze_json_output(portfolio_file, capsys):
    exit_code = main(["analyze", portfolio_file, "--format", "json", "--seed", "42", "--sequential"])

    report = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert report['summary']['portfolio_id'] == "pf-cli"
    assert report['summary']['risk_level'] == "moderate"
    assert [f['name'] for f in report['risk_factors']] == ["Geographic Concentration", "Low Liquidity"]


def test_analyze_text_output(portfolio_file, capsys):
    exit_code = main(["analyze", portfolio_file, "--seed", "1", "--months", "6"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Portfolio: pf-cli" in output
    assert "(moderate)" in output
    assert "sharpe_ratio" in output and "n/a" in output
    assert "[critical] Low Liquidity" in output


def test_config_file_option(portfolio_file, tmp_path, capsys):
    config_path = tmp_path / "risk.yaml"
    config_path.write_text("risk:\n  trailing_months: 24\n  benchmark_seed: 5\n")

    exit_code = main(["analyze", portfolio_file, "--config", str(config_path), "--format", "json"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)['summary']['portfolio_id'] == "pf-cli"


def test_invalid_months_is_configuration_error(portfolio_file, capsys):
    exit_code = main(["analyze", portfolio_file, "--months", "1"])

    assert exit_code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_missing_config_file(portfolio_file, capsys):
    exit_code = main(["analyze", portfolio_file, "--config", "missing.yaml"])

    assert exit_code == 2
    assert "Config file not found" in capsys.readouterr().err


def test_missing_portfolio_file(capsys):
    exit_code = main(["analyze", "absent.json"])

    assert exit_code == 2
    assert "Could not load portfolio" in capsys.readouterr().err


def test_malformed_portfolio_document(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"id": "pf-bad"}))

    assert main(["analyze", str(path)]) == 2
    assert "Could not load portfolio" in capsys.readouterr().err


def test_invalid_portfolio_exit_code(tmp_path, capsys):
    document = dict(PORTFOLIO_DOCUMENT, properties=[])
    path = tmp_path / "empty.json"
    path.write_text(json.dumps(document))

    exit_code = main(["analyze", str(path), "--format", "json", "--seed", "1"])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert json.loads(captured.out)['success'] is False
    assert "Portfolio has no properties" in captured.err


def test_command_is_required():
    with pytest.raises(SystemExit) as exc_info:
        main([])

    assert exc_info.value.code == 2


def test_environment_overrides_apply(portfolio_file, capsys):
    with patch.dict(os.environ, {"TRAILING_MONTHS": "3"}):
        exit_code = main(["analyze", portfolio_file, "--format", "json", "--seed", "9"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)['summary']['recommendation_count'] == 0


def test_portfolio_load_is_logged(portfolio_file, caplog):
    with caplog.at_level(logging.INFO, logger="realty_risk.cli"):
        assert main(["analyze", portfolio_file, "--format", "json", "--seed", "3"]) == 0

    cli_messages = [r.getMessage() for r in caplog.records if r.name == "realty_risk.cli"]
    assert any(m.startswith("Loaded portfolio pf-cli with 2 properties") for m in cli_messages)


def test_portfolio_load_failure_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="realty_risk.cli"):
        assert main(["analyze", "absent.json"]) == 2

    assert any(r.levelno == logging.ERROR and "Could not load portfolio from absent.json" in r.getMessage()
               for r in caplog.records)


def test_non_finite_total_value_rejected_on_load(tmp_path, capsys):
    path = tmp_path / "nan.json"
    path.write_text(json.dumps(dict(PORTFOLIO_DOCUMENT, totalValue=float("nan"))))

    assert main(["analyze", str(path)]) == 2
    assert "Could not load portfolio" in capsys.readouterr().err
