"""
DLMM Fee Mathematics

Базовая комиссия пары кодируется двумя числами:
- base_factor (u16)
- base_fee_power_factor (u8)

base_fee_rate = base_factor * 10^power_factor * bin_step * 10   (в единицах 1e-9)
fee_bps       = base_factor * 10^power_factor * bin_step / 10000

Кодирование без потерь: либо точное представление, либо ошибка.

Пример: bin_step=10, fee=30 bps -> base_factor=30000, power_factor=0
    base_fee_rate = 30000 * 10 * 10 = 3_000_000 -> 0.3%
"""

import logging
from decimal import Decimal
from typing import Tuple

from config import BASIS_POINT_MAX, FEE_PRECISION, U8_MAX, U16_MAX
from ..errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    HasDecimalsError,
    InvalidInputError,
)
from .prices import DecimalLike, to_decimal

logger = logging.getLogger(__name__)


def _check_u16(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if value < 0 or value > U16_MAX:
        raise InvalidInputError(f"{name} must be in [0, {U16_MAX}], got {value}")
    return value


def _check_power_factor(power_factor: int) -> int:
    if isinstance(power_factor, bool) or not isinstance(power_factor, int):
        raise InvalidInputError(f"power_factor must be an integer, got {power_factor!r}")
    if power_factor < 0 or power_factor > U8_MAX:
        raise InvalidInputError(f"power_factor must be in [0, {U8_MAX}], got {power_factor}")
    return power_factor


def compute_base_factor_from_fee_bps(bin_step: int, fee_bps: int) -> Tuple[int, int]:
    """
    Расчёт (base_factor, power_factor) из комиссии в базисных пунктах.

    base_factor = fee_bps * 10000 / bin_step
    Если результат больше u16, он делится на 10, пока остаток от деления
    равен нулю; каждое деление увеличивает power_factor.

    Args:
        bin_step: Шаг bin в базисных пунктах
        fee_bps: Базовая комиссия в базисных пунктах

    Returns:
        (base_factor, power_factor)

    Raises:
        InvalidInputError: bin_step == 0 или значения вне u16
        HasDecimalsError: Комиссия не представима точно
        ArithmeticUnderflowError: base_factor округляется до 0
        ArithmeticOverflowError: power_factor не помещается в u8
    """
    _check_u16(bin_step, "bin_step")
    _check_u16(fee_bps, "fee_bps")
    if bin_step == 0:
        raise InvalidInputError("bin_step must be > 0")

    computed_base_factor = Decimal(fee_bps) * Decimal(BASIS_POINT_MAX) / Decimal(bin_step)

    if computed_base_factor > U16_MAX:
        truncated_base_factor = computed_base_factor
        base_power_factor = 0
        while truncated_base_factor > U16_MAX:
            if truncated_base_factor % 10 != 0:
                raise HasDecimalsError(
                    f"fee {fee_bps} bps with bin_step {bin_step}: "
                    f"base factor {computed_base_factor} has decimals"
                )
            base_power_factor += 1
            truncated_base_factor /= 10

        if base_power_factor > U8_MAX:
            raise ArithmeticOverflowError(f"power factor {base_power_factor} overflows u8")

        logger.debug(
            f"fee {fee_bps} bps, bin_step {bin_step} -> "
            f"base_factor={truncated_base_factor}, power_factor={base_power_factor}"
        )
        return int(truncated_base_factor), base_power_factor

    truncated = int(computed_base_factor)
    if truncated != computed_base_factor:
        if truncated == 0:
            raise ArithmeticUnderflowError(
                f"fee {fee_bps} bps with bin_step {bin_step}: base factor {computed_base_factor} underflows"
            )
        raise HasDecimalsError(
            f"fee {fee_bps} bps with bin_step {bin_step}: base factor {computed_base_factor} has decimals"
        )

    return truncated, 0


def fee_bps_from_base_factor(bin_step: int, base_factor: int, power_factor: int) -> Decimal:
    """
    Обратное преобразование: комиссия в базисных пунктах.

    fee_bps = bin_step * base_factor * 10^power_factor / 10000
    """
    _check_u16(bin_step, "bin_step")
    _check_u16(base_factor, "base_factor")
    _check_power_factor(power_factor)

    numerator = Decimal(bin_step) * Decimal(base_factor) * (Decimal(10) ** power_factor)
    return numerator / Decimal(BASIS_POINT_MAX)


def get_base_fee_rate(bin_step: int, base_factor: int, power_factor: int = 0) -> int:
    """
    Базовая комиссия в единицах FEE_PRECISION (1e9), как её считает программа.

    base_fee_rate = base_factor * 10^power_factor * bin_step * 10
    """
    _check_u16(bin_step, "bin_step")
    _check_u16(base_factor, "base_factor")
    _check_power_factor(power_factor)

    return base_factor * 10 ** power_factor * bin_step * 10


def fee_rate_to_fee_pct(fee_rate: int) -> Decimal:
    """Fee rate (числитель над 1e9) -> проценты. 3_000_000 -> 0.3"""
    if isinstance(fee_rate, bool) or not isinstance(fee_rate, int):
        raise InvalidInputError(f"fee_rate must be an integer, got {fee_rate!r}")
    if fee_rate < 0:
        raise InvalidInputError(f"fee_rate must be >= 0, got {fee_rate}")

    return Decimal(fee_rate) * Decimal(100) / Decimal(FEE_PRECISION)


def percent_to_bps(fraction: DecimalLike) -> int:
    """
    Доля от 1.0 -> базисные пункты (0.003 -> 30).

    Raises:
        InvalidInputError: Доля вне [0, 1]
        HasDecimalsError: Доля не кратна 1 bps
    """
    value = to_decimal(fraction, "fraction")
    if value < 0 or value > 1:
        raise InvalidInputError(f"fraction must be in [0, 1], got {value}")

    bps = value * BASIS_POINT_MAX
    if bps != bps.to_integral_value():
        raise HasDecimalsError(f"{value} is not a whole number of basis points")
    return int(bps)
