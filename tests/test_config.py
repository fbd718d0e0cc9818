"""
Tests for config.py module.

Covers dataclasses, protocol constants and helper functions:
- ProtocolConstants, IntegerWidths, EngineSettings
- Module level constants (BASIS_POINT_MAX, FEE_PRECISION, U*_MAX, ...)
- EngineSettings.from_env()
"""

import os
from dataclasses import FrozenInstanceError
from unittest.mock import patch

import pytest

from config import (
    # Dataclasses
    EngineSettings,
    IntegerWidths,
    ProtocolConstants,
    # Constants
    BASIS_POINT_MAX,
    DEFAULT_BIN_PER_POSITION,
    FEE_PRECISION,
    I32_MAX,
    I32_MIN,
    MAX_BIN_PER_ARRAY,
    MAX_DECIMAL_MANTISSA,
    PROTOCOL,
    SCALE_OFFSET,
    U8_MAX,
    U16_MAX,
    U32_MAX,
    U64_MAX,
    U128_MAX,
)


# ============================================================
# Dataclass tests
# ============================================================

class TestProtocolConstants:
    """Tests for ProtocolConstants dataclass."""

    def test_defaults(self):
        protocol = ProtocolConstants()
        assert protocol.basis_point_max == 10_000
        assert protocol.fee_precision == 1_000_000_000
        assert protocol.scale_offset == 64
        assert protocol.default_bin_per_position == 70
        assert protocol.max_bin_per_array == 70

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            PROTOCOL.basis_point_max = 1


class TestIntegerWidths:
    """Tests for IntegerWidths dataclass."""

    def test_values(self):
        widths = IntegerWidths()
        assert widths.u8_max == 255
        assert widths.u16_max == 65535
        assert widths.u32_max == 4_294_967_295
        assert widths.u64_max == 18_446_744_073_709_551_615
        assert widths.i32_min == -2_147_483_648
        assert widths.i32_max == 2_147_483_647


# ============================================================
# Module constants
# ============================================================

class TestConstants:
    """Module level aliases match the dataclasses."""

    def test_protocol_aliases(self):
        assert BASIS_POINT_MAX == 10_000
        assert FEE_PRECISION == 10 ** 9
        assert SCALE_OFFSET == 64
        assert DEFAULT_BIN_PER_POSITION == 70
        assert MAX_BIN_PER_ARRAY == 70

    def test_width_aliases(self):
        assert U8_MAX == 2 ** 8 - 1
        assert U16_MAX == 2 ** 16 - 1
        assert U32_MAX == 2 ** 32 - 1
        assert U64_MAX == 2 ** 64 - 1
        assert U128_MAX == 2 ** 128 - 1
        assert I32_MIN == -(2 ** 31)
        assert I32_MAX == 2 ** 31 - 1

    def test_max_decimal_mantissa(self):
        assert MAX_DECIMAL_MANTISSA == 79_228_162_514_264_337_593_543_950_335


# ============================================================
# EngineSettings.from_env
# ============================================================

class TestEngineSettings:
    """Tests for EngineSettings.from_env()."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = EngineSettings.from_env()
        assert settings.log_level == "INFO"
        assert settings.default_curvature == 1.0

    def test_log_level_upper_cased(self):
        with patch.dict(os.environ, {"DLMM_LOG_LEVEL": "debug"}, clear=True):
            assert EngineSettings.from_env().log_level == "DEBUG"

    def test_curvature_from_env(self):
        with patch.dict(os.environ, {"DLMM_DEFAULT_CURVATURE": "2.5"}, clear=True):
            assert EngineSettings.from_env().default_curvature == 2.5

    def test_blank_curvature_uses_default(self):
        with patch.dict(os.environ, {"DLMM_DEFAULT_CURVATURE": "  "}, clear=True):
            assert EngineSettings.from_env().default_curvature == 1.0

    @pytest.mark.parametrize("raw", ["abc", "0", "-1"])
    def test_invalid_curvature(self, raw):
        with patch.dict(os.environ, {"DLMM_DEFAULT_CURVATURE": raw}, clear=True):
            with pytest.raises(ValueError, match="DLMM_DEFAULT_CURVATURE"):
                EngineSettings.from_env()

    @pytest.mark.parametrize("raw", ["warning", "CRITICAL", "warn"])
    def test_known_log_levels(self, raw):
        with patch.dict(os.environ, {"DLMM_LOG_LEVEL": raw}, clear=True):
            assert EngineSettings.from_env().log_level == raw.upper()

    @pytest.mark.parametrize("raw", ["VERBOSE", "loud", "10x"])
    def test_invalid_log_level(self, raw):
        with patch.dict(os.environ, {"DLMM_LOG_LEVEL": raw}, clear=True):
            with pytest.raises(ValueError, match="DLMM_LOG_LEVEL"):
                EngineSettings.from_env()
