from datetime import datetime, timezone
from printmarket.extensions import db


class VendorProduct(db.Model):
    __tablename__ = "vendor_products"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.BigInteger, nullable=False, index=True)
    base_product_id = db.Column(db.Integer, nullable=False, index=True)
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    price = db.Column(db.Integer, nullable=False)  # minor units
    stock = db.Column(db.Integer, nullable=False, default=0)
    sizes = db.Column(db.JSON, default=list)
    colors = db.Column(db.JSON, default=list)

    # Snapshot of the admin base product taken at creation time
    base_name = db.Column(db.String(255), default="")
    base_price = db.Column(db.Integer)
    base_images = db.Column(db.JSON, default=list)
    base_sizes = db.Column(db.JSON, default=list)

    post_validation_action = db.Column(
        db.String(20), nullable=False, default="AUTO_PUBLISH"
    )
    status = db.Column(db.String(20), nullable=False, default="PENDING", index=True)
    is_validated = db.Column(db.Boolean, nullable=False, default=False)
    validated_at = db.Column(db.DateTime(timezone=True))
    rejection_reason = db.Column(db.Text)

    # Pre-link records only; read by scripts/migrate_legacy_design_links.py
    legacy_design_url = db.Column(db.String(1024))

    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    design = db.relationship("Design", foreign_keys=[design_id])
    links = db.relationship(
        "DesignProductLink",
        backref="vendor_product",
        lazy="dynamic",
        passive_deletes=True,
    )

    AUTO_PUBLISH = "AUTO_PUBLISH"
    TO_DRAFT = "TO_DRAFT"
    ACTIONS = {AUTO_PUBLISH, TO_DRAFT}

    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    DRAFT = "DRAFT"
    REJECTED = "REJECTED"
    VALID_STATUSES = {PENDING, PUBLISHED, DRAFT, REJECTED}
    VALIDATED_STATUSES = {PUBLISHED, DRAFT}

    @property
    def is_visible(self):
        return self.status == self.PUBLISHED

    def to_dict(self):
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "base_product_id": self.base_product_id,
            "design_id": self.design_id,
            "name": self.name,
            "description": self.description or "",
            "price": self.price,
            "stock": self.stock,
            "sizes": self.sizes or [],
            "colors": self.colors or [],
            "base_product": {
                "name": self.base_name,
                "price": self.base_price,
                "images": self.base_images or [],
                "sizes": self.base_sizes or [],
            },
            "post_validation_action": self.post_validation_action,
            "status": self.status,
            "is_validated": self.is_validated,
            "validated_at": self.validated_at.isoformat() if self.validated_at else None,
            "rejection_reason": self.rejection_reason,
        }

    def __repr__(self):
        return f"<VendorProduct {self.id}: {self.name} [{self.status}]>"
