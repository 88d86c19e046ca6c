"""Workflow runner: evaluates every rule of a workflow against one fact context."""
from typing import Iterable, List, Optional
import logging

from rulesdemo.cache import ExpressionCache

from .context import FactContext
from .errors import ParseError, RuleEvaluationError
from .evaluator import RuleEvaluator
from .registry import WorkflowRegistry
from .schema import Rule, RuleResult, Workflow, WorkflowRunResult

logger = logging.getLogger(__name__)


class RulesEngine:
    """
    Runs registered workflows.

    Rules are evaluated one after another in definition order. A failure in
    one rule (unbound name, bad operand types, failing call) becomes a failed
    RuleResult and never stops the remaining rules.

    The registry and expression cache are the only shared state; each call
    should get its own FactContext.

    Example:
        >>> engine = RulesEngine([workflow])
        >>> context = FactContext(input1=customer, businessLogic=BusinessLogic())
        >>> for result in engine.execute_all_rules("DiscountWorkflow", context):
        ...     print(result.rule_name, result.is_success, result.message)
    """

    def __init__(
        self,
        workflows: Optional[Iterable[Workflow]] = None,
        cache: Optional[ExpressionCache] = None,
        evaluator: Optional[RuleEvaluator] = None,
    ):
        if cache is None:
            cache = evaluator.cache if evaluator is not None else ExpressionCache()
        self.cache = cache
        self.evaluator = evaluator if evaluator is not None else RuleEvaluator(cache=cache)
        self.registry = WorkflowRegistry(cache=cache)
        if workflows:
            self.registry.register_all(workflows)

    def add_workflow(self, workflow: Workflow) -> None:
        """Register (or replace) a workflow. Raises WorkflowLoadError on bad rules."""
        self.registry.register(workflow)

    def workflow_names(self) -> List[str]:
        return self.registry.names()

    def execute_all_rules(self, workflow_name: str, context: FactContext) -> List[RuleResult]:
        """
        Evaluate every rule in a workflow.

        Args:
            workflow_name: Registered workflow name
            context: Fact context for this call

        Returns:
            One RuleResult per rule, in workflow definition order

        Raises:
            WorkflowNotFoundError: If no workflow has that name
        """
        workflow = self.registry.get(workflow_name)
        results = [self._execute(workflow, rule, context) for rule in workflow.rules]
        passed = sum(1 for r in results if r.is_success)
        logger.info(f"Workflow '{workflow_name}': {passed}/{len(results)} rules passed")
        return results

    def run(self, workflow_name: str, context: FactContext) -> WorkflowRunResult:
        """Same as execute_all_rules, wrapped with the workflow name and a timestamp."""
        return WorkflowRunResult(
            workflow_name=workflow_name,
            results=self.execute_all_rules(workflow_name, context),
        )

    def execute_rule(self, workflow_name: str, rule_name: str, context: FactContext) -> RuleResult:
        """Evaluate a single named rule from a workflow."""
        workflow = self.registry.get(workflow_name)
        return self._execute(workflow, workflow.rule(rule_name), context)

    def _execute(self, workflow: Workflow, rule: Rule, context: FactContext) -> RuleResult:
        try:
            compiled = self.registry.compiled(rule)
            is_success = self.evaluator.evaluate(compiled, context)
        except (ParseError, RuleEvaluationError) as e:
            logger.warning(f"Rule '{rule.name}' in workflow '{workflow.name}' failed to evaluate: {e}")
            return RuleResult(
                rule_name=rule.name,
                is_success=False,
                message=f"{rule.error_message} (evaluation failed: {e})" if rule.error_message
                else f"Evaluation failed: {e}",
                evaluation_error=f"{type(e).__name__}: {e}",
            )

        return RuleResult(
            rule_name=rule.name,
            is_success=is_success,
            message=rule.success_message if is_success else rule.error_message,
        )
