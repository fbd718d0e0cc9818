"""
DLMM bin ladder engine.

Чистые численные функции для пар с дискретной ценовой лесенкой (bins):
цена <-> bin id, кодирование комиссии, распределение ликвидности по кривой
и сжатие сумм по bins.
"""

from .errors import (
    DlmmMathError,
    InvalidInputError,
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    HasDecimalsError,
    ConsistencyViolationError,
)

__version__ = "0.1.0"

__all__ = [
    "DlmmMathError",
    "InvalidInputError",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
    "HasDecimalsError",
    "ConsistencyViolationError",
]
