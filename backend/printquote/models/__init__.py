"""
SQLAlchemy models
"""
from printquote.models.material import MaterialCatalogItem
from printquote.models.printer import PrinterProfile
from printquote.models.print_order import PrintOrder

__all__ = ["MaterialCatalogItem", "PrinterProfile", "PrintOrder"]
