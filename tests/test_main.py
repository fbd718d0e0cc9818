"""
Tests for main.py CLI.

Команды вызываются через main(argv) без запуска процесса.
"""

import logging
import os
from unittest.mock import patch

import pytest

import main as cli


@pytest.fixture(autouse=True)
def clean_env():
    """CLI читает DLMM_* из окружения; тесты не зависят от машины."""
    with patch.dict(os.environ, {}, clear=True), patch.object(cli, "load_dotenv"):
        yield


class TestBinIdCommand:
    """bin-id: UI price -> bin id."""

    BASE_ARGS = ["bin-id", "--bin-step", "25", "--base-decimals", "9", "--quote-decimals", "6"]

    def test_round_up_default(self, capsys):
        assert cli.main(self.BASE_ARGS + ["--price", "20000"]) == 0
        assert "Bin id: 1200" in capsys.readouterr().out

    def test_round_down(self, capsys):
        assert cli.main(self.BASE_ARGS + ["--price", "20000", "--rounding", "down"]) == 0
        assert "Bin id: 1199" in capsys.readouterr().out

    def test_exact_hit(self, capsys):
        # 1000 UI = 1 за lamport = bin 0
        assert cli.main(self.BASE_ARGS + ["--price", "1000", "--rounding", "exact"]) == 0
        assert "Bin id: 0" in capsys.readouterr().out

    def test_exact_miss(self, capsys):
        assert cli.main(self.BASE_ARGS + ["--price", "20000", "--rounding", "exact"]) == 1
        assert "is not an exact bin price" in capsys.readouterr().out

    def test_invalid_price(self, caplog):
        with caplog.at_level(logging.ERROR, logger="main"):
            assert cli.main(self.BASE_ARGS + ["--price", "abc"]) == 1
        assert "InvalidInputError" in caplog.text

    def test_non_positive_price(self, caplog):
        with caplog.at_level(logging.ERROR, logger="main"):
            assert cli.main(self.BASE_ARGS + ["--price", "0"]) == 1
        assert "InvalidInputError" in caplog.text


class TestPriceCommand:
    """price: bin id -> UI price."""

    def test_bin_zero(self, capsys):
        argv = ["price", "--bin-step", "25", "--bin-id", "0", "--base-decimals", "9", "--quote-decimals", "6"]
        assert cli.main(argv) == 0

        out = capsys.readouterr().out
        assert "UI price: 1000" in out
        assert f"Q64x64 price: {2 ** 64}" in out


class TestFeeCommand:
    """fee: fee bps -> (base_factor, power_factor)."""

    def test_scenario(self, capsys):
        assert cli.main(["fee", "--bin-step", "10", "--fee-bps", "30"]) == 0

        out = capsys.readouterr().out
        assert "Base factor: 30000" in out
        assert "Base fee power factor: 0" in out
        assert "Base fee: 30 bps (0.3%)" in out
        assert "Base fee rate: 3000000" in out

    def test_power_factor(self, capsys):
        assert cli.main(["fee", "--bin-step", "1", "--fee-bps", "100"]) == 0

        out = capsys.readouterr().out
        assert "Base factor: 10000" in out
        assert "Base fee power factor: 2" in out
        assert "Base fee: 100 bps (1%)" in out

    def test_has_decimals(self, caplog):
        with caplog.at_level(logging.ERROR, logger="main"):
            assert cli.main(["fee", "--bin-step", "3", "--fee-bps", "1"]) == 1
        assert "HasDecimalsError" in caplog.text


class TestSeedPlanCommand:
    """seed-plan: распределение seed liquidity."""

    ARGS = [
        "seed-plan", "--bin-step", "25", "--amount", "1",
        "--min-price", "20000", "--max-price", "30000",
        "--base-decimals", "9", "--quote-decimals", "6",
    ]

    def test_scenario(self, capsys):
        assert cli.main(self.ARGS) == 0

        out = capsys.readouterr().out
        assert "Bins: 1200..1362 (163 bins)" in out
        assert "Positions: 3" in out
        assert "#3: bins 1340..1362" in out
        assert "Fund amount: 1000000000" in out
        assert "Compression loss: 1000000000 -> bin 1362" in out
        assert "Total deposit: 1000000000" in out

    def test_show_bins(self, caplog):
        with caplog.at_level(logging.INFO, logger="dlmm.math.distribution"):
            assert cli.main(self.ARGS + ["--show-bins"]) == 0
        assert "CURVE DISTRIBUTION" in caplog.text

    def test_curvature_from_env(self):
        with patch.dict(os.environ, {"DLMM_DEFAULT_CURVATURE": "2"}):
            with patch.object(cli, "build_seed_liquidity_plan", wraps=cli.build_seed_liquidity_plan) as build:
                assert cli.main(self.ARGS) == 0

        assert build.call_args[0][0].curvature == "2.0"

    def test_invalid_curvature(self, caplog):
        with caplog.at_level(logging.ERROR, logger="main"):
            assert cli.main(self.ARGS + ["--curvature", "-1"]) == 1
        assert "InvalidInputError" in caplog.text

    def test_collapsed_range(self, caplog):
        argv = [
            "seed-plan", "--bin-step", "100", "--amount", "1",
            "--min-price", "1.001", "--max-price", "1.002",
            "--base-decimals", "6", "--quote-decimals", "6",
        ]
        with caplog.at_level(logging.ERROR, logger="main"):
            assert cli.main(argv) == 1
        assert "Invalid price range" in caplog.text


class TestParser:
    """Argument parsing."""

    def test_missing_command(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_unknown_rounding(self):
        with pytest.raises(SystemExit):
            cli.main(["bin-id", "--bin-step", "25", "--price", "1", "--rounding", "nearest",
                      "--base-decimals", "6", "--quote-decimals", "6"])

    def test_commands_registered(self):
        assert set(cli.COMMANDS) == {"bin-id", "price", "fee", "seed-plan"}


class TestSettingsErrors:
    """Ошибки окружения логируются, а не падают с traceback."""

    FEE_ARGS = ["fee", "--bin-step", "10", "--fee-bps", "30"]

    @pytest.mark.parametrize("env", [
        {"DLMM_DEFAULT_CURVATURE": "abc"},
        {"DLMM_DEFAULT_CURVATURE": "-2"},
        {"DLMM_LOG_LEVEL": "VERBOSE"},
    ])
    def test_invalid_env_returns_error(self, env, caplog, capsys):
        with patch.dict(os.environ, env):
            with caplog.at_level(logging.ERROR, logger="main"):
                assert cli.main(self.FEE_ARGS) == 1

        assert "Invalid settings" in caplog.text
        assert "Base factor" not in capsys.readouterr().out

    def test_basic_config_value_error(self, caplog):
        with patch.object(cli.logging, "basicConfig", side_effect=ValueError("Unknown level: 'X'")):
            with caplog.at_level(logging.ERROR, logger="main"):
                assert cli.main(self.FEE_ARGS) == 1
        assert "Unknown level" in caplog.text
