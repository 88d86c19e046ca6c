"""Loads the bundled workflows and runs them with the standard capability objects."""
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Union
import logging

from rulesdemo.config import get_settings
from rulesdemo.rules import FactContext, RuleResult, RulesEngine, Workflow, load_workflows

from .business_logic import BusinessLogic
from .discount_service import DiscountService

logger = logging.getLogger(__name__)

DISCOUNT_RULES = "DiscountRules"
ELIGIBILITY_RULES = "EligibilityRules"
VALIDATION_RULES = "ValidationRules"


class RulesEngineService:
    """
    Facade over RulesEngine for the demo workflows.

    The primary input is bound as `input1`; `businessLogic` and
    `discountService` are bound on every call.
    """

    def __init__(
        self,
        rules_dir: Optional[Union[str, Path]] = None,
        current_date: Optional[date] = None,
        extra_workflows: Optional[List[Workflow]] = None,
    ):
        settings = get_settings()
        self.rules_dir = Path(rules_dir) if rules_dir is not None else settings.rules_dir
        self.business_logic = BusinessLogic(current_date or settings.current_date)
        self.discount_service = DiscountService()

        workflows = load_workflows(self.rules_dir)
        if extra_workflows:
            workflows.extend(extra_workflows)
        self.engine = RulesEngine(workflows)
        logger.info(f"Rules engine ready with workflows: {', '.join(self.engine.workflow_names())}")

    def build_context(self, input1: Any = None, **facts: Any) -> FactContext:
        context = FactContext(
            businessLogic=self.business_logic,
            discountService=self.discount_service,
        )
        if input1 is not None:
            context.bind("input1", input1)
        for name, value in facts.items():
            context.bind(name, value)
        return context

    def execute_workflow(self, workflow_name: str, input1: Any = None, **facts: Any) -> List[RuleResult]:
        return self.engine.execute_all_rules(workflow_name, self.build_context(input1, **facts))

    def execute_discount_rules(self, customer: Any) -> List[RuleResult]:
        return self.execute_workflow(DISCOUNT_RULES, customer)

    def execute_eligibility_rules(self, input1: Any) -> List[RuleResult]:
        return self.execute_workflow(ELIGIBILITY_RULES, input1)

    def execute_validation_rules(self, input1: Any) -> List[RuleResult]:
        return self.execute_workflow(VALIDATION_RULES, input1)
