"""
Pricing Policy

price = hourly rate x hours, with an optional day rate: every full
8 hour block is charged at the daily rate and the remainder hourly.

    10 h at 15.00/h, 100.00/day -> 1 x 100.00 + 2 x 15.00 = 130.00
     6 h at 15.00/h             -> 6 x 15.00            =  90.00
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from shared.domain.value_objects import TWO_PLACES

HOURS_IN_DAY = Decimal(8)


def calculate_price(hours: Decimal, price_per_hour: Decimal, price_per_day: Optional[Decimal] = None) -> Decimal:
    if hours is None or price_per_hour is None or hours <= 0 or price_per_hour < 0:
        return Decimal('0.00')

    hours = Decimal(hours)
    price_per_hour = Decimal(price_per_hour)

    if price_per_day and hours >= HOURS_IN_DAY:
        days = hours // HOURS_IN_DAY
        remaining = hours - days * HOURS_IN_DAY
        total = days * Decimal(price_per_day) + remaining * price_per_hour
    else:
        total = hours * price_per_hour

    return total.quantize(TWO_PLACES, ROUND_HALF_UP)
