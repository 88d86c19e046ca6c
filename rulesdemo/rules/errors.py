"""Exception hierarchy for rule compilation and evaluation."""
from typing import Optional


class RuleEngineError(Exception):
    """Base class for all rules engine errors."""
    pass


class ParseError(RuleEngineError):
    """
    Raised when an expression does not match the rule grammar.

    Attributes:
        position: Zero-based character offset of the offending token
        reason: Human-readable description of the problem
        source: The expression text being compiled
    """

    def __init__(self, position: int, reason: str, source: str = ""):
        self.position = position
        self.reason = reason
        self.source = source
        super().__init__(f"{reason} at position {position}")

    def pointer(self) -> str:
        """Render the source with a caret under the offending position."""
        if not self.source:
            return ""
        return f"{self.source}\n{' ' * self.position}^"


class RuleEvaluationError(RuleEngineError):
    """Raised when evaluating a compiled expression fails."""
    pass


class ResolutionError(RuleEvaluationError):
    """An identifier or member could not be found in the fact context."""
    pass


class RuleTypeError(RuleEvaluationError):
    """An operator was applied to incompatible value kinds."""
    pass


class CallError(RuleEvaluationError):
    """A capability operation is missing or was called with bad arguments."""
    pass


class WorkflowLoadError(RuleEngineError):
    """Raised when a workflow definition cannot be registered."""

    def __init__(self, message: str, workflow_name: Optional[str] = None, rule_name: Optional[str] = None):
        self.workflow_name = workflow_name
        self.rule_name = rule_name
        super().__init__(message)


class WorkflowNotFoundError(RuleEngineError, KeyError):
    """Raised when no workflow is registered under the requested name."""

    def __init__(self, workflow_name: str):
        self.workflow_name = workflow_name
        super().__init__(workflow_name)

    def __str__(self) -> str:
        return f"No workflow registered with name '{self.workflow_name}'"
