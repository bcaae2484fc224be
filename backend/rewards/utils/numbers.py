"""
Разбор чисел из пользовательского ввода
"""
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Optional
import math

# Границы колонок Integer (int32 в PostgreSQL)
MAX_POINTS = 2**31 - 1
MIN_POINTS = -MAX_POINTS - 1


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Привести значение к конечному Decimal

    Строки допускают запятую как десятичный разделитель ("12,5").
    Возвращает None, если значение не является конечным числом.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        number = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    if not number.is_finite():
        return None
    return number


def floor_int(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def points_in_range(value: int) -> bool:
    return MIN_POINTS <= value <= MAX_POINTS


def usd_to_points(amount_usd: Decimal, rate: int) -> Optional[int]:
    """
    floor(amount * rate) без ошибок двоичной арифметики

    Возвращает None, если результат не помещается в колонку баллов.
    """
    # rate >= 1, поэтому произведение не меньше суммы
    if amount_usd > MAX_POINTS or rate > MAX_POINTS:
        return None
    points = floor_int(amount_usd * Decimal(rate))
    if points > MAX_POINTS:
        return None
    return points
