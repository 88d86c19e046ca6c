"""Workflow registry and rule-definition file loader."""
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import json
import logging

from pydantic import TypeAdapter, ValidationError

from rulesdemo.cache import ExpressionCache

from .compiler import CompiledExpression
from .errors import ParseError, WorkflowLoadError, WorkflowNotFoundError
from .schema import Rule, Workflow

logger = logging.getLogger(__name__)

_workflow_list = TypeAdapter(List[Workflow])


class WorkflowRegistry:
    """
    Registry maintaining mapping from workflow name -> workflow.

    Every rule is compiled when its workflow is registered, so a malformed
    expression is reported at load time instead of on first evaluation.
    """

    def __init__(self, cache: Optional[ExpressionCache] = None):
        self.cache = cache if cache is not None else ExpressionCache()
        self._workflows: Dict[str, Workflow] = {}

    def register(self, workflow: Workflow) -> None:
        seen = set()
        for rule in workflow.rules:
            if rule.name in seen:
                raise WorkflowLoadError(
                    f"Workflow '{workflow.name}' defines rule '{rule.name}' more than once",
                    workflow_name=workflow.name,
                    rule_name=rule.name,
                )
            seen.add(rule.name)
            try:
                self.cache.get_or_compile(rule.expression)
            except ParseError as e:
                raise WorkflowLoadError(
                    f"Rule '{rule.name}' in workflow '{workflow.name}' has an invalid expression: {e}",
                    workflow_name=workflow.name,
                    rule_name=rule.name,
                ) from e

        if workflow.name in self._workflows:
            logger.warning(f"Replacing previously registered workflow '{workflow.name}'")
        self._workflows[workflow.name] = workflow
        logger.debug(f"Registered workflow '{workflow.name}' with {len(workflow.rules)} rules")

    def register_all(self, workflows: Iterable[Workflow]) -> int:
        count = 0
        for workflow in workflows:
            self.register(workflow)
            count += 1
        return count

    def get(self, name: str) -> Workflow:
        if name not in self._workflows:
            raise WorkflowNotFoundError(name)
        return self._workflows[name]

    def compiled(self, rule: Rule) -> CompiledExpression:
        """Compiled tree for a registered rule (recompiled if the cache was cleared)."""
        return self.cache.get_or_compile(rule.expression)

    def names(self) -> List[str]:
        return list(self._workflows)

    def all(self) -> Dict[str, Workflow]:
        return dict(self._workflows)

    def __contains__(self, name: object) -> bool:
        return name in self._workflows


def parse_workflows(payload: Union[str, bytes, list, dict], source: str = "<memory>") -> List[Workflow]:
    """
    Validate rule definitions already decoded from JSON (or JSON text).

    Accepts a list of workflows or a single workflow object.

    Raises:
        WorkflowLoadError: If the payload is not valid JSON or does not match the schema
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise WorkflowLoadError(f"{source}: invalid JSON: {e}") from e
    if isinstance(payload, dict):
        payload = [payload]
    try:
        return _workflow_list.validate_python(payload)
    except ValidationError as e:
        raise WorkflowLoadError(f"{source}: invalid workflow definition: {e}") from e


def load_workflows(path: Union[str, Path]) -> List[Workflow]:
    """
    Load workflows from a JSON file or every ``*.json`` file in a directory.

    Files in a directory are read in name order. Unreadable or non-UTF-8
    files raise WorkflowLoadError like malformed ones do.

    Example:
        >>> workflows = load_workflows("rulesdemo/workflows")
        >>> [w.name for w in workflows]
        ['DiscountRules', 'EligibilityRules', 'ValidationRules']
    """
    path = Path(path)
    if path.is_dir():
        files = sorted(path.glob("*.json"))
    elif path.is_file():
        files = [path]
    else:
        raise WorkflowLoadError(f"Rule definition path not found: {path}")

    workflows: List[Workflow] = []
    for file_path in files:
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise WorkflowLoadError(f"{file_path}: cannot read rule definitions: {e}") from e
        loaded = parse_workflows(text, source=str(file_path))
        logger.info(f"Loaded {len(loaded)} workflow(s) from {file_path.name}")
        workflows.extend(loaded)
    return workflows
