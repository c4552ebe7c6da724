from .order import Order, OrderItem
from .quotation import Quotation, QuotationItem
from .sales_target import SalesTarget

__all__ = ["Quotation", "QuotationItem", "Order", "OrderItem", "SalesTarget"]
