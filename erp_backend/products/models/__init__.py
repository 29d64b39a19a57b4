# products/models/__init__.py

from .product import Product
from .work_order import WorkOrder

__all__ = ["Product", "WorkOrder"]
