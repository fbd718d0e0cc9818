"""
DLMM Price Conversions

Две шкалы цены:
- price per token   - UI цена: сколько quote токенов за 1 целый base токен
- price per lamport - цена за 1 атомарную единицу base в атомарных единицах quote

Формулы:
- price_per_lamport = price_per_token * 10^quote_decimals / 10^base_decimals
- price_per_token   = price_per_lamport * 10^base_decimals / 10^quote_decimals

Пример: BTC/USDC = 30000, BTC 9 decimals, USDC 6 decimals
    price_per_lamport = 30000 * 10^6 / 10^9 = 30

Все вычисления в Decimal: float используется только на входе.
"""

import math
from decimal import Decimal, InvalidOperation, getcontext
from typing import Union

from config import MAX_DECIMAL_MANTISSA, SCALE_OFFSET, U8_MAX, U64_MAX, U128_MAX
from ..errors import ArithmeticOverflowError, InvalidInputError

# Высокая точность для расчётов
getcontext().prec = 50

DecimalLike = Union[Decimal, float, int, str]

# Максимальное значение on-chain decimal типа
MAX_DECIMAL = Decimal(MAX_DECIMAL_MANTISSA)

Q64 = Decimal(2) ** SCALE_OFFSET


def to_decimal(value: DecimalLike, name: str = "value") -> Decimal:
    """
    Преобразование входного значения в конечный Decimal.

    float конвертируется через str(), чтобы сохранить десятичную запись
    (Decimal(0.1) дал бы 0.1000000000000000055511151231257827...).

    Raises:
        InvalidInputError: NaN, бесконечность или нечисловой тип
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got bool")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be finite, got {value}")
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidInputError(f"{name} is not a number: {value!r}")
    else:
        raise InvalidInputError(f"{name} must be a number, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {result}")
    return result


def check_decimals(decimals: int, name: str = "decimals") -> int:
    """Token decimals are stored as u8."""
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidInputError(f"{name} must be an integer, got {decimals!r}")
    if decimals < 0 or decimals > U8_MAX:
        raise InvalidInputError(f"{name} must be in [0, {U8_MAX}], got {decimals}")
    return decimals


def _checked(value: Decimal, what: str) -> Decimal:
    if abs(value) > MAX_DECIMAL:
        raise ArithmeticOverflowError(f"{what} overflow: {value:.6E} exceeds decimal range")
    return value


def _rescale(price: Decimal, multiply_decimals: int, divide_decimals: int, what: str) -> Decimal:
    scaled = _checked(price * (Decimal(10) ** multiply_decimals), what)
    return _checked(scaled / (Decimal(10) ** divide_decimals), what)


def price_per_token_to_per_lamport(
    price_per_token: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int
) -> Decimal:
    """
    Конвертация UI цены в цену за lamport.

    Args:
        price_per_token: Цена 1 целого base токена в quote токенах
        base_token_decimal: Decimals base токена
        quote_token_decimal: Decimals quote токена

    Returns:
        Цена за атомарную единицу (Decimal)

    Raises:
        InvalidInputError: Отрицательная/нечисловая цена или decimals вне u8
        ArithmeticOverflowError: Результат не помещается в decimal тип

    Example:
        price_per_token_to_per_lamport(30000.0, 9, 6)  # -> 30
    """
    price = to_decimal(price_per_token, "price_per_token")
    if price < 0:
        raise InvalidInputError(f"price_per_token must be >= 0, got {price}")
    check_decimals(base_token_decimal, "base_token_decimal")
    check_decimals(quote_token_decimal, "quote_token_decimal")

    return _rescale(price, quote_token_decimal, base_token_decimal, "price_per_token_to_per_lamport")


def price_per_lamport_to_price_per_token(
    price_per_lamport: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int
) -> Decimal:
    """
    Конвертация цены за lamport в UI цену (обратная к price_per_token_to_per_lamport).

    Example:
        price_per_lamport_to_price_per_token(30, 9, 6)  # -> 30000
    """
    price = to_decimal(price_per_lamport, "price_per_lamport")
    if price < 0:
        raise InvalidInputError(f"price_per_lamport must be >= 0, got {price}")
    check_decimals(base_token_decimal, "base_token_decimal")
    check_decimals(quote_token_decimal, "quote_token_decimal")

    return _rescale(price, base_token_decimal, quote_token_decimal, "price_per_lamport_to_price_per_token")


def q64x64_price_to_decimal(q64x64_price: int) -> Decimal:
    """
    Конвертация цены из Q64.64 (u128) в Decimal.

    Старшие 64 бита - целая часть, младшие 64 - дробная.
    """
    if isinstance(q64x64_price, bool) or not isinstance(q64x64_price, int):
        raise InvalidInputError(f"q64x64_price must be an integer, got {q64x64_price!r}")
    if q64x64_price < 0 or q64x64_price > U128_MAX:
        raise InvalidInputError(f"q64x64_price must fit in u128, got {q64x64_price}")

    return Decimal(q64x64_price) / Q64


def to_wei_amount(amount: int, decimals: int) -> int:
    """
    Количество целых токенов -> атомарные единицы (u64).

    Raises:
        ArithmeticOverflowError: Результат больше u64
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInputError(f"amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InvalidInputError(f"amount must be >= 0, got {amount}")
    check_decimals(decimals)

    wei_amount = amount * 10 ** decimals
    if wei_amount > U64_MAX:
        raise ArithmeticOverflowError(f"to_wei_amount overflow: {amount} * 10^{decimals}")
    return wei_amount


def ui_amount_to_wei(amount: DecimalLike, decimals: int) -> int:
    """
    Точное преобразование дробной UI суммы в атомарные единицы.

    Избегает проблем с точностью float: 0.000001 с 18 decimals даёт
    ровно 1000000000000. Дробный остаток отбрасывается (floor).

    Example:
        ui_amount_to_wei(1.5, 9)  # -> 1500000000
    """
    amount_decimal = to_decimal(amount, "amount")
    if amount_decimal < 0:
        raise InvalidInputError(f"amount must be >= 0, got {amount_decimal}")
    check_decimals(decimals)

    result = int(amount_decimal * (Decimal(10) ** decimals))
    if result > U64_MAX:
        raise ArithmeticOverflowError(f"ui_amount_to_wei overflow: {amount_decimal} * 10^{decimals}")
    return result
