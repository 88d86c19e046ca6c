"""Rule expression compilation and workflow evaluation."""
from .compiler import CompiledExpression, compile_expression
from .context import FactContext, rule_operation
from .engine import RulesEngine
from .errors import (
    CallError,
    ParseError,
    ResolutionError,
    RuleEngineError,
    RuleEvaluationError,
    RuleTypeError,
    WorkflowLoadError,
    WorkflowNotFoundError,
)
from .evaluator import RuleEvaluator, get_evaluator
from .registry import WorkflowRegistry, load_workflows, parse_workflows
from .schema import Rule, RuleResult, Workflow, WorkflowRunResult

__all__ = [
    "CompiledExpression",
    "compile_expression",
    "FactContext",
    "rule_operation",
    "RulesEngine",
    "CallError",
    "ParseError",
    "ResolutionError",
    "RuleEngineError",
    "RuleEvaluationError",
    "RuleTypeError",
    "WorkflowLoadError",
    "WorkflowNotFoundError",
    "RuleEvaluator",
    "get_evaluator",
    "WorkflowRegistry",
    "load_workflows",
    "parse_workflows",
    "Rule",
    "RuleResult",
    "Workflow",
    "WorkflowRunResult",
]
