"""Fact context: the named values and capability objects a rule may reference."""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from .errors import CallError, ResolutionError

OPERATION_ATTR = "__rule_operation__"

DEFAULT_FUNCTIONS: Dict[str, Callable] = {
    "len": len,
    "min": min,
    "max": max,
    "abs": abs,
    "round": round,
}


def rule_operation(name: Optional[str] = None):
    """
    Publish a method to rule expressions under `name`.

    Example:
        >>> class Greeter:
        ...     @rule_operation("IsPolite")
        ...     def is_polite(self, text):
        ...         return "please" in text
    """
    def decorator(func):
        setattr(func, OPERATION_ATTR, name or func.__name__)
        return func
    return decorator


def collect_operations(value: Any) -> Dict[str, Callable]:
    """Build the name -> bound method table for an object's published operations."""
    table: Dict[str, Callable] = {}
    # Walk base classes first so subclasses override published names
    for klass in reversed(type(value).__mro__):
        for attr_name, attr in vars(klass).items():
            published = getattr(attr, OPERATION_ATTR, None)
            if published is not None:
                table[published] = getattr(value, attr_name)
    return table


class FactContext:
    """
    Named bindings supplied to one evaluation call.

    Plain records are read by dotted path; objects with methods decorated by
    `rule_operation` get a dispatch table built once, at bind time.

    Example:
        >>> context = FactContext(input1=customer, businessLogic=BusinessLogic())
        >>> context.resolve("input1") is customer
        True
    """

    def __init__(self, functions: Optional[Dict[str, Callable]] = None, **bindings: Any):
        self._values: Dict[str, Any] = {}
        self._operations: Dict[str, Dict[str, Callable]] = {}
        self._functions: Dict[str, Callable] = dict(DEFAULT_FUNCTIONS if functions is None else functions)
        for name, value in bindings.items():
            self.bind(name, value)

    def bind(self, name: str, value: Any) -> None:
        """Add or replace a binding."""
        if not name or not name.isidentifier():
            raise ValueError(f"Invalid binding name: {name!r}")
        self._values[name] = value
        operations = collect_operations(value)
        if operations:
            self._operations[name] = operations
        else:
            self._operations.pop(name, None)

    def register_function(self, name: str, func: Callable) -> None:
        """Make `func` callable from rules without a receiver, e.g. ``max(a, b)``."""
        if not callable(func):
            raise ValueError(f"Function '{name}' is not callable")
        self._functions[name] = func

    def resolve(self, name: str) -> Any:
        if name not in self._values:
            raise ResolutionError(
                f"Identifier '{name}' is not bound. Available: {self.names()}"
            )
        return self._values[name]

    def operation(self, name: str, method: str) -> Callable:
        """Look up a published operation on the object bound to `name`."""
        operations = self._operations.get(name)
        if operations is None:
            raise CallError(f"'{name}' does not expose any rule operations")
        if method not in operations:
            raise CallError(
                f"'{name}' has no operation '{method}'. Available: {sorted(operations)}"
            )
        return operations[method]

    def function(self, name: str) -> Callable:
        if name not in self._functions:
            raise CallError(f"Unknown function '{name}'. Available: {sorted(self._functions)}")
        return self._functions[name]

    def names(self) -> List[str]:
        return list(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


def read_member(value: Any, member: str) -> Any:
    """
    Read one member from a data record.

    Lookup order: mapping key, exact attribute, snake_case form of a
    PascalCase name (``TotalPurchasesToDate`` -> ``total_purchases_to_date``).
    Private members and methods are never readable, and neither is the
    ``model_*`` machinery of a pydantic record.

    Raises:
        ResolutionError: If no readable member matches, or reading it fails
    """
    if member.startswith("_"):
        raise ResolutionError(f"Member '{member}' is not readable")

    if isinstance(value, Mapping):
        if member in value:
            return value[member]
        snake = to_snake(member)
        if snake in value:
            return value[snake]
        raise ResolutionError(f"Key '{member}' not found on {type(value).__name__}")

    for candidate in (member, to_snake(member)):
        if candidate.startswith("_"):
            continue
        if isinstance(value, BaseModel) and candidate.startswith("model_"):
            raise ResolutionError(f"Member '{member}' is not readable")
        try:
            result = getattr(value, candidate)
        except AttributeError:
            continue
        except Exception as e:
            # Computed properties may fail on the record's own data
            raise ResolutionError(
                f"Reading '{member}' from {type(value).__name__} failed: {type(e).__name__}: {e}"
            ) from e
        if callable(result):
            raise ResolutionError(
                f"Member '{member}' on {type(value).__name__} is a method; call it through a capability"
            )
        return result

    raise ResolutionError(f"'{type(value).__name__}' has no member '{member}'")
