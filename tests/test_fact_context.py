"""Unit tests for FactContext bindings and member reads."""
from datetime import date
from decimal import Decimal

import pytest

from rulesdemo.models import Customer
from rulesdemo.rules import CallError, FactContext, ResolutionError, rule_operation
from rulesdemo.rules.context import collect_operations, read_member


class Base:
    @rule_operation("Greet")
    def greet(self):
        return "base"

    @rule_operation()
    def Ping(self):
        return "pong"


class Child(Base):
    @rule_operation("Greet")
    def greet_loudly(self):
        return "CHILD"


class TestBindings:
    """Test bind/resolve."""

    def test_bind_and_resolve(self):
        context = FactContext()
        context.bind("input1", {"A": 1})
        assert context.resolve("input1") == {"A": 1}
        assert "input1" in context
        assert context.names() == ["input1"]

    def test_keyword_construction_preserves_order(self):
        context = FactContext(input1=1, businessLogic=2, discountService=3)
        assert context.names() == ["input1", "businessLogic", "discountService"]
        assert len(context) == 3

    def test_rebind_replaces_value(self):
        context = FactContext(input1=1)
        context.bind("input1", 2)
        assert context.resolve("input1") == 2

    def test_resolve_unbound(self):
        with pytest.raises(ResolutionError, match="input9"):
            FactContext(input1=1).resolve("input9")

    @pytest.mark.parametrize("name", ["", "1abc", "a.b", "with space"])
    def test_invalid_binding_name(self, name):
        with pytest.raises(ValueError):
            FactContext().bind(name, 1)

    def test_register_non_callable(self):
        with pytest.raises(ValueError):
            FactContext().register_function("x", 42)

    def test_default_functions_can_be_replaced(self):
        context = FactContext(functions={})
        with pytest.raises(CallError):
            context.function("max")


class TestOperations:
    """Test published operation dispatch tables."""

    def test_collect_operations(self):
        table = collect_operations(Base())
        assert sorted(table) == ["Greet", "Ping"]
        assert table["Greet"]() == "base"

    def test_subclass_overrides_published_name(self):
        table = collect_operations(Child())
        assert table["Greet"]() == "CHILD"
        assert table["Ping"]() == "pong"

    def test_operation_lookup(self):
        context = FactContext(svc=Base())
        assert context.operation("svc", "Ping")() == "pong"

    def test_operation_missing(self):
        context = FactContext(svc=Base())
        with pytest.raises(CallError, match="Available"):
            context.operation("svc", "Nope")

    def test_rebinding_plain_value_drops_operations(self):
        context = FactContext(svc=Base())
        context.bind("svc", {"A": 1})
        with pytest.raises(CallError, match="does not expose"):
            context.operation("svc", "Ping")


class TestReadMember:
    """Test member reads on records."""

    def setup_method(self):
        self.customer = Customer(
            name="Ann",
            total_purchases_to_date=Decimal("1200"),
            registration_date=date(2020, 5, 1),
        )

    def test_pascal_case_maps_to_field(self):
        assert read_member(self.customer, "TotalPurchasesToDate") == Decimal("1200")
        assert read_member(self.customer, "Name") == "Ann"

    def test_exact_attribute_name(self):
        assert read_member(self.customer, "name") == "Ann"

    def test_computed_property(self):
        expected = date.today().year - 2020
        assert read_member(self.customer, "YearsAsCustomer") == expected

    def test_mapping_keys(self):
        assert read_member({"LoyaltyFactor": 5}, "LoyaltyFactor") == 5
        assert read_member({"loyalty_factor": 5}, "LoyaltyFactor") == 5

    def test_private_members_are_hidden(self):
        with pytest.raises(ResolutionError):
            read_member(self.customer, "__class__")
        with pytest.raises(ResolutionError):
            read_member({"_secret": 1}, "_secret")

    def test_methods_are_not_readable(self):
        with pytest.raises(ResolutionError, match="method"):
            read_member(Base(), "greet")

    def test_model_machinery_is_hidden(self):
        for member in ("model_fields", "ModelFields", "model_computed_fields", "ModelDump", "model_config"):
            with pytest.raises(ResolutionError, match="not readable"):
                read_member(self.customer, member)

    def test_model_prefix_allowed_on_plain_records(self):
        assert read_member({"model_year": 2020}, "model_year") == 2020

    def test_failing_property_becomes_resolution_error(self):
        class Broken:
            @property
            def ratio(self):
                return 1 / 0

        with pytest.raises(ResolutionError, match="ZeroDivisionError") as exc_info:
            read_member(Broken(), "Ratio")
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_missing_member(self):
        with pytest.raises(ResolutionError, match="no member 'Salary'"):
            read_member(self.customer, "Salary")
