"""Compiled expression cache shared by evaluators and workflows."""
from .expression_cache import ExpressionCache

__all__ = ["ExpressionCache"]
