"""Tree-walking evaluator for compiled rule expressions."""
from decimal import Decimal
from typing import Any, Callable, List, Optional, Union
import inspect
import logging

from rulesdemo.cache import ExpressionCache

from .compiler import CompiledExpression
from .context import FactContext, collect_operations, read_member
from .errors import CallError, ParseError, RuleEvaluationError, RuleTypeError
from .nodes import (
    Arithmetic,
    Comparison,
    Expr,
    Literal,
    Logical,
    MemberPath,
    MethodCall,
    Negate,
    Not,
)

logger = logging.getLogger(__name__)

Expression = Union[str, CompiledExpression]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _align_numbers(left: Any, right: Any) -> tuple:
    """Promote a float to Decimal when the other operand is a Decimal."""
    if isinstance(left, Decimal) and isinstance(right, float):
        return left, Decimal(str(right))
    if isinstance(right, Decimal) and isinstance(left, float):
        return Decimal(str(left)), right
    return left, right


def _kind(value: Any) -> str:
    return "null" if value is None else type(value).__name__


class RuleEvaluator:
    """
    Evaluates compiled rule expressions against a FactContext.

    Supported operations:
    - Comparisons: <, >, <=, >=, ==, !=
    - Logical: AND/&&, OR/||, NOT/! (AND and OR short-circuit)
    - Arithmetic: +, -, *, /, %
    - Member access: input1.TotalPurchasesToDate
    - Capability calls: businessLogic.IsVipCustomer(a, b)
    - Function calls: max(a, b)
    - Parentheses for grouping

    Example:
        >>> evaluator = RuleEvaluator()
        >>> context = FactContext(input1={"LoyaltyFactor": 5})
        >>> evaluator.evaluate("input1.LoyaltyFactor >= 3", context)
        True
    """

    def __init__(self, cache: Optional[ExpressionCache] = None):
        """
        Initialize rule evaluator.

        Args:
            cache: Compiled expression cache used for text expressions
        """
        self.cache = cache if cache is not None else ExpressionCache()

    def compile(self, expression: Expression) -> CompiledExpression:
        """Return a compiled tree, compiling text through the cache."""
        if isinstance(expression, CompiledExpression):
            return expression
        return self.cache.get_or_compile(expression)

    def evaluate(self, expression: Expression, context: FactContext) -> bool:
        """
        Evaluate a boolean rule expression.

        Args:
            expression: Expression text or an already compiled expression
            context: Named values and capability objects

        Returns:
            Boolean result of the expression

        Raises:
            ParseError: If expression text does not compile
            ResolutionError: If an identifier or member is missing
            RuleTypeError: If operands are incompatible or the result is not boolean
            CallError: If a capability operation is missing or fails

        Example:
            >>> evaluator.evaluate(
            ...     "businessLogic.IsVipCustomer(input1.TotalPurchasesToDate, input1.LoyaltyFactor)",
            ...     context,
            ... )
            True
        """
        result = self.evaluate_value(expression, context)
        if not isinstance(result, bool):
            raise RuleTypeError(f"Rule expression must produce a boolean, got {_kind(result)}")
        return result

    def evaluate_value(self, expression: Expression, context: FactContext) -> Any:
        """Evaluate an expression and return its raw value (not coerced to bool)."""
        compiled = self.compile(expression)
        return self._eval(compiled.root, context)

    def evaluate_safe(self, expression: Expression, context: FactContext, default: bool = False) -> bool:
        """
        Evaluate a rule expression with fallback on error.

        Unlike evaluate(), this method returns a default value on error
        instead of raising an exception. Useful for non-critical rules.

        Example:
            >>> # Unbound 'input2' won't raise, just returns False
            >>> evaluator.evaluate_safe("input2.Age > 50", context, default=False)
            False
        """
        try:
            return self.evaluate(expression, context)
        except (ParseError, RuleEvaluationError) as e:
            logger.warning(f"Rule evaluation failed, using default: {e}")
            return default

    def validate_expression(self, expression: str) -> tuple[bool, Optional[str]]:
        """
        Validate rule expression syntax without evaluating it.

        Returns:
            Tuple of (is_valid, error_message)

        Example:
            >>> evaluator.validate_expression("input1.Age <")
            (False, "Expected a value, identifier or '(', found end of expression at position 12")
        """
        try:
            self.compile(expression)
            return True, None
        except ParseError as e:
            return False, str(e)

    def extract_required_features(self, expression: Expression) -> List[str]:
        """
        Names an expression reads from the fact context, sorted.

        Example:
            >>> evaluator.extract_required_features("businessLogic.IsWeekend() AND input1.Age > 3")
            ['businessLogic', 'input1']
        """
        return sorted(self.compile(expression).references())

    def validate_features(self, expression: Expression, context: FactContext) -> tuple[bool, List[str]]:
        """
        Check that every name the expression reads is bound in the context.

        Returns:
            Tuple of (all_available, missing_names)
        """
        missing = [name for name in self.extract_required_features(expression) if name not in context]
        return len(missing) == 0, missing

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _eval(self, node: Expr, context: FactContext) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, MemberPath):
            return self._eval_path(node, context)
        if isinstance(node, MethodCall):
            return self._eval_call(node, context)
        if isinstance(node, Logical):
            return self._eval_logical(node, context)
        if isinstance(node, Comparison):
            return self._eval_comparison(node, context)
        if isinstance(node, Arithmetic):
            return self._eval_arithmetic(node, context)
        if isinstance(node, Not):
            operand = self._eval(node.operand, context)
            if not isinstance(operand, bool):
                raise RuleTypeError(f"Operator NOT requires a boolean, got {_kind(operand)}")
            return not operand
        if isinstance(node, Negate):
            operand = self._eval(node.operand, context)
            if not _is_number(operand):
                raise RuleTypeError(f"Unary '-' requires a number, got {_kind(operand)}")
            try:
                return -operand
            except ArithmeticError as e:
                raise RuleEvaluationError(f"Arithmetic error in unary '-': {type(e).__name__}") from e
        raise RuleEvaluationError(f"Unsupported node type: {type(node).__name__}")

    def _eval_path(self, node: MemberPath, context: FactContext) -> Any:
        value = context.resolve(node.root)
        for member in node.members:
            if value is None:
                raise RuleTypeError(f"Cannot read '{member}' from null in '{'.'.join(node.parts)}'")
            value = read_member(value, member)
        return value

    def _eval_call(self, node: MethodCall, context: FactContext) -> Any:
        target = self._resolve_callable(node, context)
        args = [self._eval(arg, context) for arg in node.args]
        name = node.method if node.receiver is None else f"{'.'.join(node.receiver.parts)}.{node.method}"

        try:
            inspect.signature(target).bind(*args)
        except TypeError as e:
            raise CallError(f"Bad arguments for '{name}': {e}") from e
        except ValueError:
            # Some builtins expose no signature; let the call itself decide
            pass

        try:
            return target(*args)
        except RuleEvaluationError:
            raise
        except Exception as e:
            raise CallError(f"'{name}' failed: {type(e).__name__}: {e}") from e

    def _resolve_callable(self, node: MethodCall, context: FactContext) -> Callable:
        if node.receiver is None:
            return context.function(node.method)
        if not node.receiver.members:
            context.resolve(node.receiver.root)
            return context.operation(node.receiver.root, node.method)

        # Nested receiver (a.b.Method()): read the object, then use its published operations
        receiver = self._eval_path(node.receiver, context)
        operations = collect_operations(receiver)
        if node.method not in operations:
            raise CallError(
                f"'{'.'.join(node.receiver.parts)}' has no operation '{node.method}'"
            )
        return operations[node.method]

    def _eval_logical(self, node: Logical, context: FactContext) -> bool:
        left = self._eval(node.left, context)
        if not isinstance(left, bool):
            raise RuleTypeError(f"Operator {node.op} requires boolean operands, got {_kind(left)}")
        # Skip the right side when the left already decides the result
        if node.op == "AND" and not left:
            return False
        if node.op == "OR" and left:
            return True
        right = self._eval(node.right, context)
        if not isinstance(right, bool):
            raise RuleTypeError(f"Operator {node.op} requires boolean operands, got {_kind(right)}")
        return right

    def _eval_comparison(self, node: Comparison, context: FactContext) -> bool:
        left, right = _align_numbers(self._eval(node.left, context), self._eval(node.right, context))
        op = node.op
        if op not in ("==", "!=") and (left is None or right is None):
            raise RuleTypeError(f"Cannot compare {_kind(left)} {op} {_kind(right)}")
        try:
            if op == "==":
                return left == right
            if op == "!=":
                return left != right
            if op == ">=":
                return left >= right
            if op == "<=":
                return left <= right
            if op == ">":
                return left > right
            return left < right
        except (TypeError, ArithmeticError) as e:
            # Decimal NaN refuses ordering with InvalidOperation
            raise RuleTypeError(f"Cannot compare {_kind(left)} {op} {_kind(right)}") from e

    def _eval_arithmetic(self, node: Arithmetic, context: FactContext) -> Any:
        left = self._eval(node.left, context)
        right = self._eval(node.right, context)
        op = node.op

        if op == "+" and isinstance(left, str) and isinstance(right, str):
            return left + right
        if not (_is_number(left) and _is_number(right)):
            raise RuleTypeError(f"Operator '{op}' not supported between {_kind(left)} and {_kind(right)}")

        left, right = _align_numbers(left, right)
        try:
            if op == "+":
                return left + right
            if op == "-":
                return left - right
            if op == "*":
                return left * right
            if op == "/":
                return left / right
            return left % right
        except ArithmeticError as e:
            raise RuleEvaluationError(f"Arithmetic error in '{op}': {type(e).__name__}") from e


# Global evaluator instance (singleton pattern)
_global_evaluator = None


def get_evaluator() -> RuleEvaluator:
    """
    Get global rule evaluator instance.

    Returns:
        Singleton RuleEvaluator instance
    """
    global _global_evaluator
    if _global_evaluator is None:
        _global_evaluator = RuleEvaluator()
    return _global_evaluator
