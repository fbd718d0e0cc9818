"""
DLMM Bin Mathematics

Основные формулы:
- base = 1 + bin_step / 10000
- price_per_lamport(id) = base^id
- id = log(price_per_lamport) / log(base)
- ui_price(id) = base^id * 10^(base_decimals - quote_decimals)

Лесенка строго возрастает по bin id. Точное совпадение цены с bin
проверяется отдельно от округления (Rounding.UP / Rounding.DOWN).
"""

import logging
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_EVEN, Overflow
from enum import Enum
from typing import Optional, Tuple

from config import (
    BASIS_POINT_MAX,
    I32_MAX,
    I32_MIN,
    MAX_BIN_PER_ARRAY,
    U16_MAX,
    U128_MAX,
)
from ..errors import ArithmeticOverflowError, ArithmeticUnderflowError, InvalidInputError
from .prices import (
    DecimalLike,
    Q64,
    price_per_lamport_to_price_per_token,
    price_per_token_to_per_lamport,
    to_decimal,
)

logger = logging.getLogger(__name__)

# Допуск, в пределах которого log(price)/log(base) считается целым.
# Соответствует точности decimal типа (28 знаков) с запасом.
EXACT_ID_TOLERANCE = Decimal("1e-20")


class Rounding(Enum):
    """Направление округления bin id."""
    UP = "up"
    DOWN = "down"


def check_bin_step(bin_step: int) -> int:
    """bin_step хранится как u16 и не может быть 0."""
    if isinstance(bin_step, bool) or not isinstance(bin_step, int):
        raise InvalidInputError(f"bin_step must be an integer, got {bin_step!r}")
    if bin_step <= 0 or bin_step > U16_MAX:
        raise InvalidInputError(f"bin_step must be in [1, {U16_MAX}], got {bin_step}")
    return bin_step


def check_bin_id(bin_id: int, name: str = "bin_id") -> int:
    """Bin id - знаковое 32-битное целое."""
    if isinstance(bin_id, bool) or not isinstance(bin_id, int):
        raise InvalidInputError(f"{name} must be an integer, got {bin_id!r}")
    if bin_id < I32_MIN or bin_id > I32_MAX:
        raise ArithmeticOverflowError(f"{name} {bin_id} does not fit in i32")
    return bin_id


def get_base(bin_step: int) -> Decimal:
    """
    Основание лесенки: 1 + bin_step / 10000.

    Деление на степень 10 в Decimal точное.
    """
    check_bin_step(bin_step)
    return Decimal(1) + Decimal(bin_step) / Decimal(BASIS_POINT_MAX)


def get_price_from_id(bin_step: int, bin_id: int) -> Decimal:
    """
    Цена за lamport для bin: base^bin_id.

    Raises:
        ArithmeticOverflowError: base^bin_id вне диапазона Decimal
        ArithmeticUnderflowError: base^bin_id округляется до 0
    """
    base = get_base(bin_step)
    check_bin_id(bin_id)

    try:
        price = base ** bin_id
    except Overflow:
        raise ArithmeticOverflowError(f"price overflow for bin_id={bin_id}, bin_step={bin_step}")

    if price == 0:
        raise ArithmeticUnderflowError(f"price underflow for bin_id={bin_id}, bin_step={bin_step}")
    return price


def _check_price(price: DecimalLike) -> Decimal:
    value = to_decimal(price, "price")
    if value <= 0:
        raise InvalidInputError(f"price must be positive, got {value}")
    return value


def _raw_id(bin_step: int, price: DecimalLike) -> Tuple[Decimal, Decimal]:
    """log(price) / log(base) и ближайшее к нему целое."""
    base = get_base(bin_step)
    value = _check_price(price)

    raw = value.ln() / base.ln()
    nearest = raw.to_integral_value(rounding=ROUND_HALF_EVEN)
    return raw, nearest


def _to_i32(value: Decimal) -> int:
    bin_id = int(value)
    if bin_id < I32_MIN or bin_id > I32_MAX:
        raise ArithmeticOverflowError(f"bin id {bin_id} does not fit in i32")
    return bin_id


def get_precise_id_from_price(bin_step: int, price: DecimalLike) -> Optional[int]:
    """
    Точный bin id для цены за lamport.

    Возвращает id только если price == base^id (log-отношение целое
    в пределах точности decimal). Цена между двумя bins -> None.

    Args:
        bin_step: Шаг bin в базисных пунктах
        price: Цена за lamport

    Returns:
        bin id или None
    """
    raw, nearest = _raw_id(bin_step, price)
    if abs(raw - nearest) > EXACT_ID_TOLERANCE:
        return None
    return _to_i32(nearest)


def get_id_from_price(bin_step: int, price: DecimalLike, rounding: Rounding) -> int:
    """
    Bin id для цены за lamport с округлением.

    Rounding.UP - ceil, Rounding.DOWN - floor. Для цены, точно лежащей
    на лесенке, оба направления дают один и тот же id.

    Args:
        bin_step: Шаг bin в базисных пунктах
        price: Цена за lamport
        rounding: Направление округления

    Returns:
        bin id (i32)

    Example:
        get_id_from_price(25, Decimal("20"), Rounding.UP)    # -> 1200
        get_id_from_price(25, Decimal("20"), Rounding.DOWN)  # -> 1199
    """
    if not isinstance(rounding, Rounding):
        raise InvalidInputError(f"rounding must be a Rounding, got {rounding!r}")

    raw, nearest = _raw_id(bin_step, price)
    if abs(raw - nearest) <= EXACT_ID_TOLERANCE:
        return _to_i32(nearest)

    if rounding is Rounding.UP:
        return _to_i32(raw.to_integral_value(rounding=ROUND_CEILING))
    return _to_i32(raw.to_integral_value(rounding=ROUND_FLOOR))


def get_ui_price_from_id(
    bin_step: int,
    bin_id: int,
    base_token_decimal: int,
    quote_token_decimal: int
) -> Decimal:
    """
    UI цена bin: base^bin_id * 10^(base_decimals - quote_decimals).
    """
    price_per_lamport = get_price_from_id(bin_step, bin_id)
    return price_per_lamport_to_price_per_token(
        price_per_lamport, base_token_decimal, quote_token_decimal
    )


def get_active_id_from_ui_price(
    bin_step: int,
    price: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int
) -> int:
    """
    Активный bin для инициализации пары или синхронизации цены.

    Округление вверх: начальный bin никогда не ниже запрошенной цены.
    """
    price_per_lamport = price_per_token_to_per_lamport(price, base_token_decimal, quote_token_decimal)
    return get_id_from_price(bin_step, price_per_lamport, Rounding.UP)


def convert_min_max_ui_price_to_min_max_bin_id(
    bin_step: int,
    min_price: DecimalLike,
    max_price: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int
) -> Tuple[int, int]:
    """
    Диапазон UI цен -> диапазон bin id.

    Обе границы округляются вверх.

    Returns:
        (min_bin_id, max_bin_id)
    """
    min_price_per_lamport = price_per_token_to_per_lamport(
        min_price, base_token_decimal, quote_token_decimal
    )
    min_bin_id = get_id_from_price(bin_step, min_price_per_lamport, Rounding.UP)

    max_price_per_lamport = price_per_token_to_per_lamport(
        max_price, base_token_decimal, quote_token_decimal
    )
    max_bin_id = get_id_from_price(bin_step, max_price_per_lamport, Rounding.UP)

    logger.debug(
        f"Price range {min_price}-{max_price} -> bins {min_bin_id}..{max_bin_id} (bin_step={bin_step})"
    )
    return min_bin_id, max_bin_id


def get_q64x64_price_from_id(bin_step: int, bin_id: int) -> int:
    """
    Цена bin в формате Q64.64 (floor).

    Приближение on-chain значения через Decimal, для отображения.
    """
    price = get_price_from_id(bin_step, bin_id)
    q64x64_price = int(price * Q64)
    if q64x64_price > U128_MAX:
        raise ArithmeticOverflowError(f"Q64.64 price overflow for bin_id={bin_id}")
    return q64x64_price


def bin_id_to_bin_array_index(bin_id: int) -> int:
    """
    Индекс bin array для bin id.

    Массив содержит 70 bins подряд:
    - Array 0: bins [0, 69]
    - Array -1: bins [-70, -1]

    Floor division корректно работает для отрицательных id.
    """
    check_bin_id(bin_id)
    return bin_id // MAX_BIN_PER_ARRAY


def get_bin_array_lower_upper_bin_id(bin_array_index: int) -> Tuple[int, int]:
    """(lower_bin_id, upper_bin_id) для bin array."""
    lower_bin_id = bin_array_index * MAX_BIN_PER_ARRAY
    upper_bin_id = lower_bin_id + MAX_BIN_PER_ARRAY - 1
    return lower_bin_id, upper_bin_id
