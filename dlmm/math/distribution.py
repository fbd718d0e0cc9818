"""
Curve Distribution Module

Распределение суммы base токена по bins диапазона [min_bin_id, max_bin_id)
через кумулятивную функцию:

    C(bin) = amount * ((price(bin) - min_price) / (max_price - min_price)) ^ k
    k = 1 / curvature

    amount(bin) = C(bin + 1) - C(bin)

Свойства:
- C(min_bin_id) = 0, C(max_bin_id) = amount -> сумма по bins ровно amount
- curvature = 1: линейно по цене (bins у max_price получают больше,
  т.к. шаг цены геометрический)
- curvature > 1: C вогнутая, ликвидность смещается к min_price
- curvature < 1: C выпуклая, ликвидность смещается к max_price

Bin max_bin_id в распределение не входит: C(max_bin_id) = amount, дальше
кривая не определена. Потеря от сжатия докладывается в max_bin_id - 1
(см. compression.py, seeding.py).
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from config import DEFAULT_BIN_PER_POSITION, U64_MAX
from ..errors import ConsistencyViolationError, InvalidInputError
from .bins import check_bin_id, get_ui_price_from_id
from .prices import DecimalLike, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinAmount:
    """Сумма base токена для одного bin."""
    bin_id: int
    amount: int    # В атомарных единицах base токена


def _check_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInputError(f"amount must be an integer, got {amount!r}")
    if amount < 0 or amount > U64_MAX:
        raise InvalidInputError(f"amount must be in [0, {U64_MAX}], got {amount}")
    return amount


def curvature_to_exponent(curvature: DecimalLike) -> Decimal:
    """
    k = 1 / curvature.

    curvature задаёт форму распределения, а не показатель степени напрямую.
    """
    value = to_decimal(curvature, "curvature")
    if value <= 0:
        raise InvalidInputError(f"curvature must be > 0, got {value}")
    return Decimal(1) / value


def _cumulative(
    amount: Decimal,
    price: Decimal,
    min_price: Decimal,
    price_range: Decimal,
    k: Decimal,
    bin_id: int
) -> int:
    ratio = (price - min_price) / price_range
    if ratio < 0 or ratio > 1:
        raise ConsistencyViolationError(
            f"bin {bin_id} price {price} is outside [{min_price}, {min_price + price_range}]"
        )

    try:
        share = ratio ** k
    except InvalidOperation as e:
        raise ConsistencyViolationError(f"cannot evaluate curve at bin {bin_id}: {e!r}")

    return int(amount * share)


def get_cumulative_amount(
    amount: int,
    bin_step: int,
    bin_id: int,
    base_token_decimal: int,
    quote_token_decimal: int,
    min_price: DecimalLike,
    max_price: DecimalLike,
    k: DecimalLike
) -> int:
    """
    Значение кумулятивной функции C(bin_id), округлённое вниз.

    Args:
        amount: Фондирование в атомарных единицах base токена
        bin_step: Шаг bin
        bin_id: Bin, в котором считается C
        base_token_decimal: Decimals base токена
        quote_token_decimal: Decimals quote токена
        min_price: UI цена min_bin_id
        max_price: UI цена max_bin_id
        k: Показатель степени (1 / curvature)

    Raises:
        ConsistencyViolationError: Цена bin вне [min_price, max_price]
    """
    _check_amount(amount)
    min_price_d = to_decimal(min_price, "min_price")
    max_price_d = to_decimal(max_price, "max_price")
    if min_price_d >= max_price_d:
        raise ConsistencyViolationError(f"min_price {min_price_d} must be < max_price {max_price_d}")
    k_d = to_decimal(k, "k")
    if k_d <= 0:
        raise InvalidInputError(f"k must be > 0, got {k_d}")

    price = get_ui_price_from_id(bin_step, bin_id, base_token_decimal, quote_token_decimal)
    return _cumulative(Decimal(amount), price, min_price_d, max_price_d - min_price_d, k_d, bin_id)


def get_bin_deposit_amount(
    amount: int,
    bin_step: int,
    bin_id: int,
    base_token_decimal: int,
    quote_token_decimal: int,
    min_price: DecimalLike,
    max_price: DecimalLike,
    k: DecimalLike
) -> int:
    """
    Сумма для одного bin: C(bin_id + 1) - C(bin_id).

    Raises:
        ConsistencyViolationError: Кумулятивная функция убывает
    """
    c1 = get_cumulative_amount(
        amount, bin_step, bin_id + 1, base_token_decimal, quote_token_decimal, min_price, max_price, k
    )
    c0 = get_cumulative_amount(
        amount, bin_step, bin_id, base_token_decimal, quote_token_decimal, min_price, max_price, k
    )
    if c1 < c0:
        raise ConsistencyViolationError(f"cumulative amount decreases at bin {bin_id}: {c0} -> {c1}")
    return c1 - c0


def generate_amount_for_bins(
    bin_step: int,
    min_bin_id: int,
    max_bin_id: int,
    min_price: DecimalLike,
    max_price: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int,
    amount: int,
    curvature: DecimalLike
) -> List[BinAmount]:
    """
    Распределение суммы по bins [min_bin_id, max_bin_id).

    ВАЖНО: min_price и max_price должны быть UI ценами min_bin_id и
    max_bin_id (get_ui_price_from_id), иначе C(max_bin_id) != amount
    и распределение отклоняется.

    Args:
        bin_step: Шаг bin
        min_bin_id: Первый bin диапазона
        max_bin_id: Верхняя граница (сам bin не включается)
        min_price: UI цена min_bin_id
        max_price: UI цена max_bin_id
        base_token_decimal: Decimals base токена
        quote_token_decimal: Decimals quote токена
        amount: Фондирование в атомарных единицах base токена
        curvature: Форма распределения (> 0)

    Returns:
        Список BinAmount по возрастанию bin_id

    Raises:
        InvalidInputError: Пустой диапазон bins, curvature <= 0, некорректная сумма
        ConsistencyViolationError: Цены не согласованы с bins, кривая убывает
            или сумма по bins не равна amount

    Example:
        >>> bins = generate_amount_for_bins(
        ...     bin_step=25, min_bin_id=1200, max_bin_id=1363,
        ...     min_price=get_ui_price_from_id(25, 1200, 9, 6),
        ...     max_price=get_ui_price_from_id(25, 1363, 9, 6),
        ...     base_token_decimal=9, quote_token_decimal=6,
        ...     amount=1_000_000_000, curvature=1.0,
        ... )
        >>> sum(b.amount for b in bins)
        1000000000
    """
    check_bin_id(min_bin_id, "min_bin_id")
    check_bin_id(max_bin_id, "max_bin_id")
    if min_bin_id >= max_bin_id:
        raise InvalidInputError(f"min_bin_id {min_bin_id} must be < max_bin_id {max_bin_id}")
    _check_amount(amount)
    k = curvature_to_exponent(curvature)

    min_price_d = to_decimal(min_price, "min_price")
    max_price_d = to_decimal(max_price, "max_price")
    if min_price_d >= max_price_d:
        raise ConsistencyViolationError(f"min_price {min_price_d} must be < max_price {max_price_d}")
    price_range = max_price_d - min_price_d
    amount_d = Decimal(amount)

    # C считается один раз на каждую границу bin
    cumulative = []
    for bin_id in range(min_bin_id, max_bin_id + 1):
        price = get_ui_price_from_id(bin_step, bin_id, base_token_decimal, quote_token_decimal)
        cumulative.append(_cumulative(amount_d, price, min_price_d, price_range, k, bin_id))

    bin_amounts = []
    total_amount = 0
    for i, bin_id in enumerate(range(min_bin_id, max_bin_id)):
        c0 = cumulative[i]
        c1 = cumulative[i + 1]
        if c1 < c0:
            raise ConsistencyViolationError(f"cumulative amount decreases at bin {bin_id}: {c0} -> {c1}")

        bin_amounts.append(BinAmount(bin_id=bin_id, amount=c1 - c0))
        total_amount += c1 - c0

    if total_amount != amount:
        raise ConsistencyViolationError(
            f"Amount distributed to bins ({total_amount}) not equals to funding amount ({amount})"
        )

    logger.debug(
        f"Distributed {amount} over bins {min_bin_id}..{max_bin_id - 1} "
        f"(curvature={curvature}, k={k})"
    )
    return bin_amounts


def bin_amounts_to_map(bin_amounts: List[BinAmount]) -> Dict[int, int]:
    """List[BinAmount] -> {bin_id: amount}."""
    return {b.bin_id: b.amount for b in bin_amounts}


def get_number_of_position_required_to_cover_range(min_bin_id: int, max_bin_id: int) -> int:
    """
    Количество позиций для покрытия диапазона bins.

    Каждая позиция покрывает DEFAULT_BIN_PER_POSITION (70) bins.
    """
    check_bin_id(min_bin_id, "min_bin_id")
    check_bin_id(max_bin_id, "max_bin_id")
    bin_delta = max_bin_id - min_bin_id
    if bin_delta < 0:
        raise InvalidInputError(f"max_bin_id {max_bin_id} must be >= min_bin_id {min_bin_id}")

    return int(math.ceil(bin_delta / DEFAULT_BIN_PER_POSITION))


def get_position_bin_ranges(min_bin_id: int, max_bin_id: int) -> List[Tuple[int, int]]:
    """
    Границы позиций (lower_bin_id, upper_bin_id) для диапазона [min_bin_id, max_bin_id).

    Верхняя граница последней позиции ограничена max_bin_id - 1.
    """
    position_number = get_number_of_position_required_to_cover_range(min_bin_id, max_bin_id)

    ranges = []
    for i in range(position_number):
        lower_bin_id = min_bin_id + DEFAULT_BIN_PER_POSITION * i
        upper_bin_id = lower_bin_id + DEFAULT_BIN_PER_POSITION - 1
        ranges.append((lower_bin_id, min(upper_bin_id, max_bin_id - 1)))
    return ranges


def print_distribution(
    bin_amounts: List[BinAmount],
    base_token_decimal: Optional[int] = None,
    max_rows: int = 20
) -> None:
    """
    Вывод распределения в лог.

    Args:
        bin_amounts: Результат generate_amount_for_bins
        base_token_decimal: Если задано, суммы показываются в целых токенах
        max_rows: Сколько строк показать (первые и последние bins)
    """
    logger.info("\n" + "=" * 60)
    logger.info("CURVE DISTRIBUTION")
    logger.info("=" * 60)

    total = sum(b.amount for b in bin_amounts)
    logger.info(f"\n{'Bin':<10} {'Amount':>24} {'Share':>8}")
    logger.info("-" * 60)

    if len(bin_amounts) > max_rows:
        half = max_rows // 2
        shown = bin_amounts[:half] + [None] + bin_amounts[-half:]
    else:
        shown = list(bin_amounts)

    for b in shown:
        if b is None:
            logger.info(f"{'...':<10}")
            continue
        share = b.amount / total * 100 if total else 0.0
        if base_token_decimal is not None:
            amount_str = f"{Decimal(b.amount) / (Decimal(10) ** base_token_decimal):,.6f}"
        else:
            amount_str = f"{b.amount:,}"
        logger.info(f"{b.bin_id:<10} {amount_str:>24} {share:>7.2f}%")

    logger.info("-" * 60)
    logger.info(f"TOTAL: {total:,} across {len(bin_amounts)} bins")
    logger.info("=" * 60)
