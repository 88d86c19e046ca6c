"""Business predicates exposed to rule expressions as `businessLogic`."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from rulesdemo.rules.context import rule_operation

VIP_MIN_PURCHASES = Decimal("5000")
VIP_MIN_LOYALTY = 5

# Inclusive lower bounds, checked from the highest tier down
DISCOUNT_CATEGORIES = [
    (Decimal("10000"), "Platinum"),
    (Decimal("5000"), "Gold"),
    (Decimal("1000"), "Silver"),
]
DEFAULT_CATEGORY = "Bronze"

Amount = Union[int, float, Decimal]


def _as_decimal(value: Amount) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class BusinessLogic:
    """
    Customer predicates and classifications.

    Args:
        current_date: Date treated as "today" (defaults to the real date)
    """

    def __init__(self, current_date: Optional[date] = None):
        if isinstance(current_date, datetime):
            current_date = current_date.date()
        self.current_date = current_date or date.today()

    @rule_operation("IsVipCustomer")
    def is_vip_customer(self, total_purchases: Amount, loyalty_factor: int) -> bool:
        return _as_decimal(total_purchases) >= VIP_MIN_PURCHASES and loyalty_factor >= VIP_MIN_LOYALTY

    @rule_operation("IsValidEmail")
    def is_valid_email(self, email: Optional[str]) -> bool:
        return bool(email) and "@" in email and "." in email

    @rule_operation("GetCustomerAge")
    def get_customer_age(self, registration_date: date) -> int:
        """Whole calendar years between registration and the current date."""
        return self.current_date.year - registration_date.year

    @rule_operation("GetDiscountCategory")
    def get_discount_category(self, total_purchases: Amount) -> str:
        total = _as_decimal(total_purchases)
        for threshold, category in DISCOUNT_CATEGORIES:
            if total >= threshold:
                return category
        return DEFAULT_CATEGORY

    @rule_operation("IsWeekend")
    def is_weekend(self) -> bool:
        # Monday=0 ... Saturday=5, Sunday=6
        return self.current_date.weekday() >= 5
