"""Discount eligibility exposed to rule expressions as `discountService`."""
from decimal import Decimal

from rulesdemo.models import Customer
from rulesdemo.rules.context import rule_operation

ELIGIBLE_MIN_PURCHASES = Decimal("1000")
ELIGIBLE_MIN_LOYALTY = 2

# (inclusive lower bound, discount percentage), highest first
DISCOUNT_TIERS = [
    (Decimal("10000"), Decimal("30")),
    (Decimal("5000"), Decimal("25")),
    (Decimal("2500"), Decimal("15")),
    (Decimal("1000"), Decimal("10")),
]


class DiscountService:
    """Discount rules that take a whole customer record."""

    @rule_operation("IsEligibleForDiscount")
    def is_eligible_for_discount(self, customer: Customer) -> bool:
        return (
            customer.total_purchases_to_date >= ELIGIBLE_MIN_PURCHASES
            and customer.loyalty_factor >= ELIGIBLE_MIN_LOYALTY
        )

    @rule_operation("GetDiscountPercentage")
    def get_discount_percentage(self, customer: Customer) -> Decimal:
        for threshold, percentage in DISCOUNT_TIERS:
            if customer.total_purchases_to_date >= threshold:
                return percentage
        return Decimal("0")
