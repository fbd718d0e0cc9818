"""
Bin Amount Compression

Суммы по bins хранятся on-chain как u32, поэтому u64 суммы делятся на
multiplier (обычно 10^base_decimals):

    compressed[bin] = amount[bin] // multiplier
    loss += amount[bin] - compressed[bin] * multiplier

Инвариант: sum(compressed * multiplier) + loss == sum(amount).
Потеря (loss) докладывается отдельно в верхний bin диапазона в
несжатом виде - это делает вызывающий код, не этот модуль.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping

from config import U32_MAX, U64_MAX
from ..errors import ArithmeticOverflowError, InvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompressionResult:
    """Результат сжатия сумм по bins."""
    compressed_bin_amount: Dict[int, int] = field(default_factory=dict)  # bin_id -> u32
    compression_loss: int = 0                                           # u64

    def decompressed_total(self, multiplier: int) -> int:
        """Сумма, которая будет внесена: сжатые суммы * multiplier + потеря."""
        return sum(v * multiplier for v in self.compressed_bin_amount.values()) + self.compression_loss


def _check_multiplier(multiplier: int) -> int:
    if isinstance(multiplier, bool) or not isinstance(multiplier, int):
        raise InvalidInputError(f"multiplier must be an integer, got {multiplier!r}")
    if multiplier <= 0 or multiplier > U64_MAX:
        raise InvalidInputError(f"multiplier must be in [1, {U64_MAX}], got {multiplier}")
    return multiplier


def compress_bin_amount(bins_amount: Mapping[int, int], multiplier: int) -> CompressionResult:
    """
    Сжатие сумм по bins до u32.

    Args:
        bins_amount: {bin_id: amount} в атомарных единицах (u64)
        multiplier: Делитель сжатия (> 0)

    Returns:
        CompressionResult со сжатыми суммами и суммарной потерей

    Raises:
        InvalidInputError: multiplier <= 0 или отрицательная сумма
        ArithmeticOverflowError: Сжатая сумма больше u32 (multiplier слишком мал)
            или сумма/потеря больше u64
    """
    _check_multiplier(multiplier)

    compressed_bin_amount = {}
    compression_loss = 0

    for bin_id, amount in bins_amount.items():
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidInputError(f"amount for bin {bin_id} must be an integer, got {amount!r}")
        if amount < 0:
            raise InvalidInputError(f"amount for bin {bin_id} must be >= 0, got {amount}")
        if amount > U64_MAX:
            raise ArithmeticOverflowError(f"amount for bin {bin_id} does not fit in u64: {amount}")

        compressed_amount = amount // multiplier
        if compressed_amount > U32_MAX:
            raise ArithmeticOverflowError(
                f"compressed amount for bin {bin_id} does not fit in u32: "
                f"{amount} // {multiplier} = {compressed_amount}"
            )
        compressed_bin_amount[bin_id] = compressed_amount

        compression_loss += amount - compressed_amount * multiplier
        if compression_loss > U64_MAX:
            raise ArithmeticOverflowError(f"compression loss overflows u64 at bin {bin_id}")

    logger.debug(
        f"Compressed {len(compressed_bin_amount)} bins with multiplier {multiplier}, "
        f"loss {compression_loss}"
    )
    return CompressionResult(
        compressed_bin_amount=compressed_bin_amount,
        compression_loss=compression_loss,
    )


def decompress_bin_amount(compressed_bin_amount: Mapping[int, int], multiplier: int) -> Dict[int, int]:
    """Обратное преобразование без учёта потери: compressed * multiplier."""
    _check_multiplier(multiplier)
    return {bin_id: amount * multiplier for bin_id, amount in compressed_bin_amount.items()}
