from babyshop.models.product import Product
from babyshop.models.attributes import ProductColor, ProductSize
from babyshop.models.variation import ProductVariation, ProductVariationImage
from babyshop.models.order import Order
from babyshop.models.admin_user import AdminUser
from babyshop.models.audit_log import AuditLog

__all__ = [
    "Product",
    "ProductColor",
    "ProductSize",
    "ProductVariation",
    "ProductVariationImage",
    "Order",
    "AdminUser",
    "AuditLog",
]
