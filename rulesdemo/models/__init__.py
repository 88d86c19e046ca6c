from .models import Customer, Order, OrderItem, Product

__all__ = ["Customer", "Order", "OrderItem", "Product"]
