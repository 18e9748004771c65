"""
Shipping cost — zone base rate plus heavy-parcel surcharge.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shopsaga.pricing._money import ZERO, round_money, to_decimal

FREE_SHIPPING_THRESHOLD = Decimal("75")
SURCHARGE_FREE_KG = Decimal("5")
EXPEDITED_MULTIPLIER = Decimal("1.5")


@dataclass(frozen=True, slots=True)
class ZoneRate:
    base: Decimal
    per_kg: Decimal


ZONE_RATES: dict[str, ZoneRate] = {
    "local": ZoneRate(Decimal("5"), Decimal("0.5")),
    "regional": ZoneRate(Decimal("10"), Decimal("1.0")),
    "national": ZoneRate(Decimal("15"), Decimal("1.5")),
    "international": ZoneRate(Decimal("30"), Decimal("3.0")),
}
DEFAULT_ZONE = "regional"


def zone_rate(zone: object) -> ZoneRate:
    if isinstance(zone, str):
        rate = ZONE_RATES.get(zone.strip().lower())
        if rate is not None:
            return rate
    return ZONE_RATES[DEFAULT_ZONE]


def shipping_cost(
    weight: object,
    zone: object,
    subtotal: object,
    speed: str = "standard",
) -> Decimal:
    """
    Shipping for one parcel.

    Free once subtotal reaches FREE_SHIPPING_THRESHOLD. Otherwise the zone's
    base rate plus per-kg surcharge on weight above 5 kg, times 1.5 for
    expedited delivery. Unknown zones ship at the regional rate; an invalid
    weight ships for 0.
    """
    amount = to_decimal(subtotal)
    if amount is not None and amount >= FREE_SHIPPING_THRESHOLD:
        return ZERO

    kg = to_decimal(weight)
    if kg is None or kg <= 0:
        return ZERO

    rate = zone_rate(zone)
    cost = rate.base
    if kg > SURCHARGE_FREE_KG:
        cost += rate.per_kg * (kg - SURCHARGE_FREE_KG)

    if isinstance(speed, str) and speed.strip().lower() == "expedited":
        cost *= EXPEDITED_MULTIPLIER

    return round_money(cost)


__all__ = (
    "FREE_SHIPPING_THRESHOLD",
    "SURCHARGE_FREE_KG",
    "EXPEDITED_MULTIPLIER",
    "ZoneRate",
    "ZONE_RATES",
    "DEFAULT_ZONE",
    "zone_rate",
    "shipping_cost",
)
