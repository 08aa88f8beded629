from backoffice.models.product import Product, ProductAttribute
from backoffice.models.variant import Variant
from backoffice.models.location import Location
from backoffice.models.inventory import InventoryLevel
from backoffice.models.audit_log import AuditLog

__all__ = [
    "Product",
    "ProductAttribute",
    "Variant",
    "Location",
    "InventoryLevel",
    "AuditLog",
]
