"""Smoke tests for the driver."""
from __future__ import annotations

import logging

import pytest

import main
from src.config import EngineConfig


@pytest.fixture(autouse=True)
def restore_root_logger():
    # main() reconfigures the root logger; keep it from leaking into other tests.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _small_config(**overrides) -> EngineConfig:
    data = {"simulation": {"num_simulations": 20, "steps": 5, "seed": 1}}
    data.update(overrides)
    return EngineConfig.model_validate(data)


class TestDriver:
    def test_default_config_matches_constants(self) -> None:
        cfg = main.default_config()
        assert cfg.simulation.num_simulations == main.NUM_SIMULATIONS
        assert cfg.normal.volatility == main.NORMAL_VOLATILITY
        assert cfg.stress.volatility == main.STRESS_VOLATILITY
        assert cfg.risk_threshold_pct == main.RISK_THRESHOLD_PCT

    def test_run_reports_results(self, capsys) -> None:
        result = main.run(_small_config())
        out = capsys.readouterr().out
        assert result["initial_value"] == 15400.0
        assert result["stress_max_drawdown_pct"] > result["normal_max_drawdown_pct"]
        assert result["classification"] in ("High Risk", "Risk Acceptable")
        assert "Initial Value: $15,400.00" in out
        assert result["classification"] in out

    def test_main_with_config_file(self, tmp_path, capsys) -> None:
        path = tmp_path / "cfg.yaml"
        path.write_text(
            "simulation:\n  num_simulations: 10\n  steps: 3\n  seed: 2\n  workers: 2\n",
            encoding="utf-8",
        )
        assert main.main(["--config", str(path)]) == 0
        assert "RISK ENGINE EXECUTION COMPLETE" in capsys.readouterr().out

    def test_main_reports_engine_failure(self, tmp_path, capsys) -> None:
        path = tmp_path / "zero.yaml"
        path.write_text("holdings:\n  AAPL: 0\n", encoding="utf-8")
        assert main.main(["--config", str(path)]) == 1
        assert "EXECUTION COMPLETE" not in capsys.readouterr().out

    def test_main_missing_config_file(self, tmp_path, capsys) -> None:
        missing = tmp_path / "nope.yaml"
        assert main.main(["--config", str(missing)]) == 1
        captured = capsys.readouterr()
        assert "Could not load config" in captured.err
        assert "nope.yaml" in captured.err
        assert "EXECUTION COMPLETE" not in captured.out

    def test_main_invalid_config_file(self, tmp_path, capsys) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("holdings:\n  MSFT: 5\n", encoding="utf-8")
        assert main.main(["--config", str(path)]) == 1
        captured = capsys.readouterr()
        assert "unpriced symbols" in captured.err
        assert "PHASE 1" not in captured.out

    def test_main_malformed_yaml(self, tmp_path, capsys) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("simulation: [unclosed\n", encoding="utf-8")
        assert main.main(["--config", str(path)]) == 1
        assert "Could not load config" in capsys.readouterr().err
