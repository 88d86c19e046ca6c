"""The instance-method discount workflow and sample customer used by the console demo."""
from datetime import date
from decimal import Decimal
from typing import Optional

from rulesdemo.models import Customer
from rulesdemo.rules import Rule, Workflow

DISCOUNT_WORKFLOW = "DiscountWorkflow"


def build_discount_workflow() -> Workflow:
    """Rules that call `businessLogic` and `discountService` operations."""
    return Workflow(
        name=DISCOUNT_WORKFLOW,
        rules=[
            Rule(
                name="VipCustomerDiscount",
                success_message="25% VIP discount applied",
                error_message="Customer not eligible for VIP discount",
                expression="businessLogic.IsVipCustomer(input1.TotalPurchasesToDate, input1.LoyaltyFactor)",
            ),
            Rule(
                name="EmailValidationRule",
                success_message="Email is valid",
                error_message="Invalid email format",
                expression="businessLogic.IsValidEmail(input1.Email)",
            ),
            Rule(
                name="LoyalCustomerDiscount",
                success_message="15% loyal customer discount applied",
                error_message="Customer not eligible for loyal customer discount",
                expression=(
                    "businessLogic.GetCustomerAge(input1.RegistrationDate) >= 2 AND "
                    "businessLogic.GetDiscountCategory(input1.TotalPurchasesToDate) != \"Bronze\""
                ),
            ),
            Rule(
                name="WeekendBonus",
                success_message="Weekend bonus 5% applied",
                error_message="Weekend bonus not applicable",
                expression="businessLogic.IsWeekend() AND input1.LoyaltyFactor >= 3",
            ),
            Rule(
                name="ServiceBasedDiscount",
                success_message="Service-based discount applied",
                error_message="Not eligible for service-based discount",
                expression=(
                    "discountService.IsEligibleForDiscount(input1) AND "
                    "discountService.GetDiscountPercentage(input1) >= 15"
                ),
            ),
        ],
    )


def sample_customer(today: Optional[date] = None) -> Customer:
    """John Doe: registered three years ago with 6500 in purchases."""
    today = today or date.today()
    return Customer(
        customer_id=1,
        name="John Doe",
        country="USA",
        age=42,
        email="john.doe@email.com",
        total_purchases_to_date=Decimal("6500"),
        loyalty_factor=5,
        membership_level="Gold",
        registration_date=date(today.year - 3, today.month, min(today.day, 28)),
        is_email_verified=True,
    )
