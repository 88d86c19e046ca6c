"""Pydantic schemas for workflow definitions and evaluation results."""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from typing import Any, List, Optional
from datetime import datetime, timezone


def _lower_keys(data: Any) -> Any:
    """Definition files use case-insensitive property names."""
    if isinstance(data, dict):
        return {k.lower() if isinstance(k, str) else k: v for k, v in data.items()}
    return data


class Rule(BaseModel):
    """Schema for a single named rule."""

    name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("name", "rulename"),
        description="Unique rule name within its workflow",
    )
    expression: str = Field(
        ...,
        min_length=1,
        description="Rule condition expression (e.g., 'input1.LoyaltyFactor >= 3')",
    )
    success_message: str = Field(
        default="",
        validation_alias=AliasChoices("success_message", "successmessage", "successevent"),
        description="Message reported when the expression is true",
    )
    error_message: str = Field(
        default="",
        validation_alias=AliasChoices("error_message", "errormessage"),
        description="Message reported when the expression is false or fails",
    )
    description: Optional[str] = Field(default=None, description="Free-text explanation")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "RuleName": "WeekendBonus",
                "Expression": "businessLogic.IsWeekend() AND input1.LoyaltyFactor >= 3",
                "SuccessEvent": "Weekend bonus 5% applied",
                "ErrorMessage": "Weekend bonus not applicable",
            }
        },
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        return _lower_keys(data)


class Workflow(BaseModel):
    """Named, ordered collection of rules evaluated together."""

    name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("name", "workflowname"),
        description="Workflow name used to look it up in the registry",
    )
    rules: List[Rule] = Field(default_factory=list, description="Rules in evaluation order")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        return _lower_keys(data)

    def rule(self, name: str) -> Rule:
        for rule in self.rules:
            if rule.name == name:
                return rule
        raise KeyError(f"Workflow '{self.name}' has no rule '{name}'")


class RuleResult(BaseModel):
    """Result of evaluating one rule."""

    rule_name: str = Field(..., description="Which rule was evaluated")
    is_success: bool = Field(..., description="Whether the expression evaluated to True")
    message: str = Field(..., description="Success message or error message, chosen by is_success")
    evaluation_error: Optional[str] = Field(default=None, description="Error if evaluation failed")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "rule_name": "VipCustomerDiscount",
                "is_success": True,
                "message": "25% VIP discount applied",
                "evaluation_error": None,
            }
        }
    )


class WorkflowRunResult(BaseModel):
    """Complete result of running one workflow against one fact context."""

    workflow_name: str = Field(..., description="Workflow that was executed")
    results: List[RuleResult] = Field(default_factory=list, description="One result per rule, in definition order")
    evaluated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When evaluation occurred",
    )

    @property
    def passed(self) -> List[RuleResult]:
        return [r for r in self.results if r.is_success]

    @property
    def failed(self) -> List[RuleResult]:
        return [r for r in self.results if not r.is_success]
