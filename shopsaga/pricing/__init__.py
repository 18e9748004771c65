"""
Pricing — pure, stateless money arithmetic.

Every function takes plain numbers (int, float or Decimal), treats invalid
input as "no charge / no discount", and returns a Decimal rounded half-up to
cents as its last step.

    from shopsaga.pricing import discount_tier, shipping_cost, tax

    discount_tier(120)                    # Decimal("0.10")
    shipping_cost(7, "national", 40)      # Decimal("18.00")
    tax(100, "ny")                        # Decimal("8.00")
"""

from shopsaga.pricing._money import (
    CENT,
    ZERO,
    to_decimal,
    round_money,
    as_whole,
)
from shopsaga.pricing._discounts import (
    DiscountTier,
    NO_TIER,
    DISCOUNT_TIERS,
    tier_for,
    discount_tier,
    DiscountKind,
    calculate_discount,
    DiscountCode,
    DISCOUNT_CODES,
    lookup_code,
    BULK_BREAKPOINTS,
    BulkPrice,
    bulk_pricing,
    bulk_discount,
)
from shopsaga.pricing._shipping import (
    FREE_SHIPPING_THRESHOLD,
    ZONE_RATES,
    DEFAULT_ZONE,
    ZoneRate,
    zone_rate,
    shipping_cost,
)
from shopsaga.pricing._tax import (
    TAX_RATES,
    DEFAULT_TAX_RATE,
    EXEMPT_CATEGORIES,
    tax_rate,
    is_exempt,
    tax,
)
from shopsaga.pricing._loyalty import loyalty_points
from shopsaga.pricing._promotions import (
    PromoContext,
    Promotion,
    PROMOTIONS,
    apply_promotion,
)
from shopsaga.pricing._totals import final_total

__all__ = (
    # Money
    "CENT",
    "ZERO",
    "to_decimal",
    "round_money",
    "as_whole",
    # Discounts
    "DiscountTier",
    "NO_TIER",
    "DISCOUNT_TIERS",
    "tier_for",
    "discount_tier",
    "DiscountKind",
    "calculate_discount",
    "DiscountCode",
    "DISCOUNT_CODES",
    "lookup_code",
    "BULK_BREAKPOINTS",
    "BulkPrice",
    "bulk_pricing",
    "bulk_discount",
    # Shipping
    "FREE_SHIPPING_THRESHOLD",
    "ZONE_RATES",
    "DEFAULT_ZONE",
    "ZoneRate",
    "zone_rate",
    "shipping_cost",
    # Tax
    "TAX_RATES",
    "DEFAULT_TAX_RATE",
    "EXEMPT_CATEGORIES",
    "tax_rate",
    "is_exempt",
    "tax",
    # Loyalty / promotions / totals
    "loyalty_points",
    "PromoContext",
    "Promotion",
    "PROMOTIONS",
    "apply_promotion",
    "final_total",
)
