"""
Seed Liquidity Planner

Чистая часть сценария "seed liquidity by operator": всё, что считается
до сборки транзакций.

1. Сумма в целых токенах -> атомарные единицы
2. Диапазон UI цен -> (min_bin_id, max_bin_id), округление вверх
3. Фактические UI цены границ
4. Распределение по bins [min_bin_id, max_bin_id) по кривой
5. Сжатие до u32 с multiplier = 10^base_decimals
6. Разбиение на позиции по 70 bins; потеря от сжатия докладывается
   в bin max_bin_id - 1 (последний bin последней позиции)
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Tuple

from .errors import InvalidInputError
from .math.bins import convert_min_max_ui_price_to_min_max_bin_id, get_ui_price_from_id
from .math.compression import CompressionResult, compress_bin_amount
from .math.distribution import (
    BinAmount,
    bin_amounts_to_map,
    generate_amount_for_bins,
    get_position_bin_ranges,
)
from .math.prices import DecimalLike, to_wei_amount

logger = logging.getLogger(__name__)


@dataclass
class SeedLiquidityConfig:
    """
    Параметры seed liquidity.

    Example:
        config = SeedLiquidityConfig(
            bin_step=25,
            amount=1,             # 1 целый base токен
            min_price=20000.0,
            max_price=30000.0,
            base_token_decimal=9,
            quote_token_decimal=6,
            curvature=1.0,
        )
    """
    bin_step: int
    amount: int                    # В целых base токенах
    min_price: DecimalLike         # UI цена нижней границы
    max_price: DecimalLike         # UI цена верхней границы
    base_token_decimal: int
    quote_token_decimal: int
    curvature: DecimalLike = 1.0

    @property
    def fund_amount(self) -> int:
        """Сумма в атомарных единицах base токена."""
        return to_wei_amount(self.amount, self.base_token_decimal)


@dataclass
class SeedLiquidityPlan:
    """Результат планирования: всё, что нужно слою транзакций."""
    bin_step: int
    min_bin_id: int
    max_bin_id: int
    actual_min_price: Decimal
    actual_max_price: Decimal
    fund_amount: int
    multiplier: int
    bin_amounts: List[BinAmount] = field(default_factory=list)
    compression: CompressionResult = field(default_factory=CompressionResult)
    positions: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def position_count(self) -> int:
        return len(self.positions)

    @property
    def loss_top_up_bin_id(self) -> int:
        """Верхний bin диапазона: сюда докладывается потеря от сжатия."""
        return self.max_bin_id - 1

    @property
    def compression_loss(self) -> int:
        return self.compression.compression_loss

    def compressed_amounts_for_position(self, index: int) -> Dict[int, int]:
        """Сжатые суммы bins одной позиции."""
        lower_bin_id, upper_bin_id = self.positions[index]
        return {
            bin_id: amount
            for bin_id, amount in self.compression.compressed_bin_amount.items()
            if lower_bin_id <= bin_id <= upper_bin_id
        }

    def total_deposit(self) -> int:
        """Сколько будет внесено: сжатые суммы * multiplier + top-up потери."""
        return self.compression.decompressed_total(self.multiplier)


def plan_seed_liquidity(
    bin_step: int,
    min_price: DecimalLike,
    max_price: DecimalLike,
    base_token_decimal: int,
    quote_token_decimal: int,
    fund_amount: int,
    curvature: DecimalLike
) -> SeedLiquidityPlan:
    """
    Полный расчёт seed liquidity для суммы в атомарных единицах.

    Args:
        bin_step: Шаг bin пары
        min_price: UI цена нижней границы
        max_price: UI цена верхней границы
        base_token_decimal: Decimals base токена
        quote_token_decimal: Decimals quote токена
        fund_amount: Сумма в атомарных единицах base токена
        curvature: Форма распределения (> 0)

    Returns:
        SeedLiquidityPlan

    Raises:
        InvalidInputError: Диапазон цен сворачивается в пустой диапазон bins
    """
    min_bin_id, max_bin_id = convert_min_max_ui_price_to_min_max_bin_id(
        bin_step, min_price, max_price, base_token_decimal, quote_token_decimal
    )
    if min_bin_id >= max_bin_id:
        raise InvalidInputError(
            f"Invalid price range {min_price}-{max_price}: bins {min_bin_id}..{max_bin_id}"
        )

    actual_min_price = get_ui_price_from_id(bin_step, min_bin_id, base_token_decimal, quote_token_decimal)
    actual_max_price = get_ui_price_from_id(bin_step, max_bin_id, base_token_decimal, quote_token_decimal)
    positions = get_position_bin_ranges(min_bin_id, max_bin_id)

    logger.info(
        f"Start seed. Min price: {min_price} Max price: {max_price} "
        f"Actual min price: {actual_min_price:.10g} Actual max price: {actual_max_price:.10g} "
        f"Min bin id: {min_bin_id} Max bin id: {max_bin_id} Position: {len(positions)}"
    )

    bin_amounts = generate_amount_for_bins(
        bin_step,
        min_bin_id,
        max_bin_id,
        actual_min_price,
        actual_max_price,
        base_token_decimal,
        quote_token_decimal,
        fund_amount,
        curvature,
    )

    multiplier = 10 ** base_token_decimal
    compression = compress_bin_amount(bin_amounts_to_map(bin_amounts), multiplier)

    if compression.compression_loss > 0:
        logger.info(
            f"Compression loss {compression.compression_loss} will be deposited into bin {max_bin_id - 1}"
        )

    return SeedLiquidityPlan(
        bin_step=bin_step,
        min_bin_id=min_bin_id,
        max_bin_id=max_bin_id,
        actual_min_price=actual_min_price,
        actual_max_price=actual_max_price,
        fund_amount=fund_amount,
        multiplier=multiplier,
        bin_amounts=bin_amounts,
        compression=compression,
        positions=positions,
    )


def build_seed_liquidity_plan(config: SeedLiquidityConfig) -> SeedLiquidityPlan:
    """SeedLiquidityConfig -> SeedLiquidityPlan."""
    return plan_seed_liquidity(
        bin_step=config.bin_step,
        min_price=config.min_price,
        max_price=config.max_price,
        base_token_decimal=config.base_token_decimal,
        quote_token_decimal=config.quote_token_decimal,
        fund_amount=config.fund_amount,
        curvature=config.curvature,
    )
