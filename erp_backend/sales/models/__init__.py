# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .invoice import InvoiceItem, SalesInvoice
from .notes import CreditNote, DebitNote
from .order import Order, OrderItem
from .party import Party
from .quotation import Quotation

__all__ = [
    "Party",
    "Order",
    "OrderItem",
    "SalesInvoice",
    "InvoiceItem",
    "Quotation",
    "CreditNote",
    "DebitNote",
]
