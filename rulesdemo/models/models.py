from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_pascal
from datetime import date
from decimal import Decimal
from typing import List, Optional


class RecordBase(BaseModel):
    """Fields are snake_case in Python and PascalCase in rule expressions and JSON."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


# =========================
# CUSTOMER
# =========================
class Customer(RecordBase):
    customer_id: int = 0
    name: str = ""
    country: str = ""
    age: int = 0
    email: str = ""
    total_purchases_to_date: Decimal = Decimal("0")
    loyalty_factor: int = 0
    membership_level: str = ""
    registration_date: Optional[date] = None
    is_email_verified: bool = False

    @computed_field(alias="YearsAsCustomer")
    @property
    def years_as_customer(self) -> int:
        if self.registration_date is None:
            return 0
        return date.today().year - self.registration_date.year


# =========================
# PRODUCT
# =========================
class Product(RecordBase):
    product_id: int = 0
    name: str = ""
    category: str = ""
    price: Decimal = Decimal("0")
    is_in_stock: bool = False
    quantity_in_stock: int = 0
    launch_date: Optional[date] = None
    is_discount_eligible: bool = False
    brand: str = ""


# =========================
# ORDER
# =========================
class OrderItem(RecordBase):
    product: Product = Field(default_factory=Product)
    quantity: int = 0
    unit_price: Decimal = Decimal("0")

    @computed_field(alias="TotalPrice")
    @property
    def total_price(self) -> Decimal:
        return self.quantity * self.unit_price


class Order(RecordBase):
    order_id: int = 0
    customer: Customer = Field(default_factory=Customer)
    items: List[OrderItem] = Field(default_factory=list)
    order_date: Optional[date] = None
    shipping_address: str = ""
    is_urgent_delivery: bool = False

    @computed_field(alias="TotalAmount")
    @property
    def total_amount(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    @computed_field(alias="ItemCount")
    @property
    def item_count(self) -> int:
        return len(self.items)
