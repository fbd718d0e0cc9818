"""
Configuration for DLMM Bin Ladder Engine

Константы протокола DLMM (bin ladder) и настройки движка.
Все значения совпадают с on-chain программой: менять их можно только
вместе с версией программы.
"""

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ProtocolConstants:
    """Константы on-chain программы."""
    basis_point_max: int = 10_000          # 1 bps = 1 / 10_000
    fee_precision: int = 1_000_000_000     # Fee rate numerator precision (1e9)
    scale_offset: int = 64                 # Q64.64 price format
    default_bin_per_position: int = 70     # Bins covered by one position
    max_bin_per_array: int = 70            # Bins stored in one bin array


@dataclass(frozen=True)
class IntegerWidths:
    """Максимальные значения целых типов, в которые пишутся результаты."""
    u8_max: int = 2 ** 8 - 1
    u16_max: int = 2 ** 16 - 1
    u32_max: int = 2 ** 32 - 1
    u64_max: int = 2 ** 64 - 1
    u128_max: int = 2 ** 128 - 1
    i32_min: int = -(2 ** 31)
    i32_max: int = 2 ** 31 - 1


@dataclass
class EngineSettings:
    """
    Настройки движка, читаемые из окружения.

    DLMM_LOG_LEVEL         - уровень логирования CLI (INFO по умолчанию)
    DLMM_DEFAULT_CURVATURE - curvature для seed-plan, если не задана явно
    """
    log_level: str = "INFO"
    default_curvature: float = 1.0

    @classmethod
    def from_env(cls) -> 'EngineSettings':
        """Load settings from environment variables (after load_dotenv())."""
        log_level = os.getenv("DLMM_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"DLMM_LOG_LEVEL must be a logging level name, got {log_level!r}")

        raw_curvature = os.getenv("DLMM_DEFAULT_CURVATURE")
        if raw_curvature is None or raw_curvature.strip() == "":
            default_curvature = 1.0
        else:
            try:
                default_curvature = float(raw_curvature)
            except ValueError:
                raise ValueError(
                    f"DLMM_DEFAULT_CURVATURE must be a number, got {raw_curvature!r}"
                )
            if default_curvature <= 0:
                raise ValueError(
                    f"DLMM_DEFAULT_CURVATURE must be > 0, got {default_curvature}"
                )

        return cls(
            log_level=log_level,
            default_curvature=default_curvature,
        )


# ============================================================
# PROTOCOL
# ============================================================

PROTOCOL = ProtocolConstants()
WIDTHS = IntegerWidths()

BASIS_POINT_MAX = PROTOCOL.basis_point_max
FEE_PRECISION = PROTOCOL.fee_precision
SCALE_OFFSET = PROTOCOL.scale_offset
DEFAULT_BIN_PER_POSITION = PROTOCOL.default_bin_per_position
MAX_BIN_PER_ARRAY = PROTOCOL.max_bin_per_array

U8_MAX = WIDTHS.u8_max
U16_MAX = WIDTHS.u16_max
U32_MAX = WIDTHS.u32_max
U64_MAX = WIDTHS.u64_max
U128_MAX = WIDTHS.u128_max
I32_MIN = WIDTHS.i32_min
I32_MAX = WIDTHS.i32_max

# Потолок on-chain decimal типа (96-bit мантисса)
MAX_DECIMAL_MANTISSA = 2 ** 96 - 1

