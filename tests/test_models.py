"""Unit tests for the record models."""
from datetime import date
from decimal import Decimal

from rulesdemo.models import Customer, Order, OrderItem, Product


class TestCustomer:
    def test_pascal_case_construction(self):
        customer = Customer.model_validate({
            "Name": "Jane",
            "TotalPurchasesToDate": "1500.50",
            "LoyaltyFactor": 2,
            "RegistrationDate": "2021-04-02",
        })
        assert customer.name == "Jane"
        assert customer.total_purchases_to_date == Decimal("1500.50")
        assert customer.registration_date == date(2021, 4, 2)

    def test_years_as_customer(self):
        customer = Customer(registration_date=date(date.today().year - 3, 1, 1))
        assert customer.years_as_customer == 3

    def test_years_as_customer_without_registration(self):
        assert Customer().years_as_customer == 0

    def test_dump_by_alias_includes_computed_fields(self):
        dumped = Customer(name="Jane").model_dump(by_alias=True)
        assert dumped["Name"] == "Jane"
        assert "YearsAsCustomer" in dumped


class TestOrder:
    def setup_method(self):
        widget = Product(name="Widget", price=Decimal("20"), is_in_stock=True)
        gadget = Product(name="Gadget", price=Decimal("7.50"))
        self.order = Order(
            order_id=7,
            items=[
                OrderItem(product=widget, quantity=2, unit_price=Decimal("20")),
                OrderItem(product=gadget, quantity=3, unit_price=Decimal("7.50")),
            ],
        )

    def test_item_total_price(self):
        assert self.order.items[0].total_price == Decimal("40")
        assert self.order.items[1].total_price == Decimal("22.50")

    def test_total_amount(self):
        assert self.order.total_amount == Decimal("62.50")

    def test_item_count(self):
        assert self.order.item_count == 2

    def test_empty_order(self):
        order = Order()
        assert order.total_amount == Decimal("0")
        assert order.item_count == 0
