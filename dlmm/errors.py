"""
Error taxonomy for the bin ladder math.

Все ошибки пробрасываются вызывающему коду сразу, без повторов и без
подстановки значений по умолчанию.
"""


class DlmmMathError(Exception):
    """Базовое исключение для всех ошибок движка."""
    pass


class InvalidInputError(DlmmMathError, ValueError):
    """Некорректный вход: нулевой bin step, неположительная цена, пустой диапазон."""
    pass


class ArithmeticOverflowError(DlmmMathError, ArithmeticError):
    """Результат не помещается в целевой тип."""
    pass


class ArithmeticUnderflowError(DlmmMathError, ArithmeticError):
    """Результат округляется до нуля в целевом типе."""
    pass


class HasDecimalsError(DlmmMathError):
    """Значение должно быть точно представимо, но имеет дробную часть."""
    pass


class ConsistencyViolationError(DlmmMathError):
    """
    Нарушен внутренний инвариант (монотонность кумулятивной кривой,
    точная сумма по bins). Означает геометрически несогласованный вход.
    """
    pass
