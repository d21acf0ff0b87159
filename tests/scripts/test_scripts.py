"""
Tests for the operator scripts.
"""

import json
from unittest.mock import patch

import pytest

from orchestrator import ProtocolConfig, ReportingConfig
from reporting import CSV_HEADER
from scripts import executor_dry_run, health_check, simulate


class TestExecutorDryRun:
    """Tests for the one-epoch dry run."""

    def test_low_health_allocation(self, capsys, restore_logging):
        code = executor_dry_run.main(["--fees", "1.0", "--health", "25", "--log-level", "CRITICAL"])

        assert code == 0
        allocation = json.loads(capsys.readouterr().out)
        assert allocation["allocations"]["buyback"] == pytest.approx(0.85)
        assert allocation["actions"] == []

    def test_low_balance_reports_outcome(self, capsys, restore_logging):
        code = executor_dry_run.main([
            "--fees", "1.0", "--health", "60", "--balance", "0.1", "--log-level", "CRITICAL",
        ])

        assert code == 1
        outcome = json.loads(capsys.readouterr().out)
        assert outcome["abortReason"] == "low-balance"


class TestHealthCheck:
    """Tests for the health scoring script."""

    def test_alive_exit_code(self, capsys, restore_logging):
        code = health_check.main([
            "--buybacks", "5", "--volume", "10", "--sell-pressure", "5",
            "--liquidity", "100", "--volatility", "10", "--hours-since-buyback", "1",
        ])

        assert code == 0
        assert "Minutes to threshold" in capsys.readouterr().out

    def test_dead_exit_code(self, restore_logging):
        code = health_check.main([
            "--sell-pressure", "20", "--liquidity", "1", "--volatility", "50",
            "--hours-since-buyback", "120",
        ])

        assert code == 2


class TestSimulate:
    """Tests for the simulation script."""

    def test_seeded_run(self, tmp_path, capsys, restore_logging):
        config = ProtocolConfig(reporting=ReportingConfig(reports_dir=str(tmp_path / "unused")))
        reports_dir = tmp_path / "reports"

        with patch("scripts.simulate.load_protocol_config", return_value=config):
            code = simulate.main([
                "--epochs", "2", "--seed", "7", "--reports-dir", str(reports_dir),
                "--csv", "--log-level", "WARNING",
            ])

        assert code == 0
        assert len(list(reports_dir.glob("epoch-*.json"))) == 2
        assert CSV_HEADER in capsys.readouterr().out
