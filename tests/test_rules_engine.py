"""Tests for running whole workflows through RulesEngine."""
from datetime import date
from decimal import Decimal

import pytest
from pydantic import BaseModel, computed_field

from rulesdemo.rules import (
    FactContext,
    RuleEvaluator,
    RulesEngine,
    Rule,
    Workflow,
    WorkflowLoadError,
    WorkflowNotFoundError,
    rule_operation,
)
from rulesdemo.services import BusinessLogic

WEDNESDAY = date(2025, 6, 11)


class Tripwire:
    def __init__(self):
        self.calls = 0

    @rule_operation("FalsePred")
    def false_pred(self):
        return False

    @rule_operation("SideEffectCall")
    def side_effect_call(self):
        self.calls += 1
        raise RuntimeError("must not be invoked")


class ZeroRatio(BaseModel):
    a: int = 0

    @computed_field(alias="Ratio")
    @property
    def ratio(self) -> float:
        return 1 / self.a


class NanSource:
    @rule_operation("Value")
    def value(self):
        return Decimal("NaN")


def rule(name, expression):
    return Rule(
        name=name,
        expression=expression,
        success_message=f"{name} passed",
        error_message=f"{name} failed",
    )


class TestExecuteAllRules:
    """Test per-workflow evaluation."""

    def setup_method(self):
        self.context = FactContext(
            input1={"TotalPurchasesToDate": 6500, "LoyaltyFactor": 5},
            businessLogic=BusinessLogic(WEDNESDAY),
        )

    def test_vip_customer_scenario(self):
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("Vip", "businessLogic.IsVipCustomer(input1.TotalPurchasesToDate, input1.LoyaltyFactor)"),
        ])])
        [result] = engine.execute_all_rules("W", self.context)
        assert result.rule_name == "Vip"
        assert result.is_success is True
        assert result.message == "Vip passed"
        assert result.evaluation_error is None

    def test_weekend_scenario_on_weekday(self):
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("WeekendBonus", "businessLogic.IsWeekend() AND input1.LoyaltyFactor >= 3"),
        ])])
        [result] = engine.execute_all_rules("W", self.context)
        assert result.is_success is False
        assert result.message == "WeekendBonus failed"
        assert result.evaluation_error is None

    def test_one_result_per_rule_in_order(self):
        names = ["Z", "A", "M", "A2", "B"]
        engine = RulesEngine([Workflow(name="W", rules=[rule(n, "true") for n in names])])
        results = engine.execute_all_rules("W", self.context)
        assert [r.rule_name for r in results] == names

    def test_same_expression_in_several_rules(self):
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("First", "input1.LoyaltyFactor == 5"),
            rule("Second", "input1.LoyaltyFactor == 5"),
        ])])
        results = engine.execute_all_rules("W", self.context)
        assert [r.is_success for r in results] == [True, True]
        assert engine.cache.size() == 1

    def test_resolution_failure_is_isolated(self):
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("Before", "input1.LoyaltyFactor >= 5"),
            rule("Unbound", "input2.LoyaltyFactor >= 5"),
            rule("After", "input1.TotalPurchasesToDate < 1000"),
        ])])
        results = engine.execute_all_rules("W", self.context)
        assert len(results) == 3
        assert results[0].is_success is True
        assert results[1].is_success is False
        assert "ResolutionError" in results[1].evaluation_error
        assert results[1].message.startswith("Unbound failed")
        assert results[2].is_success is False
        assert results[2].evaluation_error is None
        assert results[2].message == "After failed"

    def test_type_and_call_errors_are_isolated(self):
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("TypeClash", 'input1.LoyaltyFactor > "five"'),
            rule("NoSuchOp", "businessLogic.IsMartian()"),
            rule("NotBoolean", "input1.LoyaltyFactor + 1"),
            rule("Fine", "input1.LoyaltyFactor == 5"),
        ])])
        results = engine.execute_all_rules("W", self.context)
        assert [r.is_success for r in results] == [False, False, False, True]
        assert results[0].evaluation_error.startswith("RuleTypeError")
        assert results[1].evaluation_error.startswith("CallError")
        assert results[2].evaluation_error.startswith("RuleTypeError")

    def test_short_circuit_skips_throwing_call(self):
        tripwire = Tripwire()
        engine = RulesEngine([Workflow(name="W", rules=[
            rule("ShortCircuit", "tripwire.FalsePred() AND tripwire.SideEffectCall()"),
        ])])
        [result] = engine.execute_all_rules("W", FactContext(tripwire=tripwire))
        assert result.is_success is False
        assert result.evaluation_error is None
        assert tripwire.calls == 0

    def test_failure_message_without_error_message(self):
        engine = RulesEngine([Workflow(name="W", rules=[Rule(name="Bare", expression="nothing.Here")])])
        [result] = engine.execute_all_rules("W", FactContext())
        assert result.message.startswith("Evaluation failed")

    def test_unknown_workflow(self):
        with pytest.raises(WorkflowNotFoundError):
            RulesEngine().execute_all_rules("Missing", self.context)


class TestRuntimeFailuresStayLocal:
    """Test that arithmetic and record failures fail one rule, not the workflow."""

    def setup_method(self):
        self.context = FactContext(input1=ZeroRatio(), svc=NanSource())

    def run_with_sibling(self, expression):
        engine = RulesEngine([Workflow(name="W", rules=[rule("Bad", expression), rule("Fine", "true")])])
        return engine.execute_all_rules("W", self.context)

    def test_decimal_overflow(self):
        bad, fine = self.run_with_sibling("1e999999 * 1e999999 > 0")
        assert bad.is_success is False
        assert bad.evaluation_error.startswith("RuleEvaluationError")
        assert "Overflow" in bad.evaluation_error
        assert fine.is_success is True

    def test_failing_computed_property(self):
        bad, fine = self.run_with_sibling("input1.Ratio > 0")
        assert bad.is_success is False
        assert bad.evaluation_error.startswith("ResolutionError")
        assert "ZeroDivisionError" in bad.evaluation_error
        assert fine.is_success is True

    def test_ordering_against_nan(self):
        bad, fine = self.run_with_sibling("svc.Value() > 1")
        assert bad.is_success is False
        assert bad.evaluation_error.startswith("RuleTypeError")
        assert fine.is_success is True

    def test_nan_equality_is_not_an_error(self):
        bad, fine = self.run_with_sibling("svc.Value() != 1")
        assert bad.is_success is True
        assert bad.evaluation_error is None
        assert fine.is_success is True

    def test_division_by_zero(self):
        bad, fine = self.run_with_sibling("1 / 0 > 0")
        assert bad.evaluation_error.startswith("RuleEvaluationError")
        assert fine.is_success is True


class TestRulesEngineManagement:
    """Test registration through the engine."""

    def test_add_workflow_and_names(self):
        engine = RulesEngine()
        engine.add_workflow(Workflow(name="A", rules=[rule("r", "true")]))
        engine.add_workflow(Workflow(name="B", rules=[rule("r", "false")]))
        assert engine.workflow_names() == ["A", "B"]

    def test_parse_error_surfaces_at_registration(self):
        with pytest.raises(WorkflowLoadError):
            RulesEngine([Workflow(name="Bad", rules=[rule("r", "input1.A >= ")])])

    def test_execute_single_rule(self):
        engine = RulesEngine([Workflow(name="W", rules=[rule("Yes", "true"), rule("No", "false")])])
        result = engine.execute_rule("W", "No", FactContext())
        assert result.rule_name == "No"
        assert result.is_success is False

    def test_run_wraps_results(self):
        engine = RulesEngine([Workflow(name="W", rules=[rule("Yes", "true"), rule("No", "false")])])
        run = engine.run("W", FactContext())
        assert run.workflow_name == "W"
        assert [r.rule_name for r in run.passed] == ["Yes"]
        assert [r.rule_name for r in run.failed] == ["No"]

    def test_shares_evaluator_cache(self):
        evaluator = RuleEvaluator()
        engine = RulesEngine([Workflow(name="W", rules=[rule("r", "1 == 1")])], evaluator=evaluator)
        assert engine.cache is evaluator.cache
        assert evaluator.cache.get("1 == 1") is not None

    def test_recompiles_after_cache_clear(self):
        engine = RulesEngine([Workflow(name="W", rules=[rule("r", "input1.A == 1")])])
        engine.cache.clear_all()
        [result] = engine.execute_all_rules("W", FactContext(input1={"A": Decimal("1")}))
        assert result.is_success is True
