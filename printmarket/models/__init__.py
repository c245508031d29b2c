from printmarket.models.design import Design
from printmarket.models.vendor_product import VendorProduct
from printmarket.models.design_product_link import DesignProductLink
from printmarket.models.audit_log import AuditLog

__all__ = ["Design", "VendorProduct", "DesignProductLink", "AuditLog"]
