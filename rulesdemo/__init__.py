"""Rule workflows over customer, order and product records."""

__version__ = "1.0.0"
