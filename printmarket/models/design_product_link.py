from datetime import datetime, timezone
from printmarket.extensions import db


class DesignProductLink(db.Model):
    """Association between a design and a product built from it.

    The link rows for a design are the set of products a validation
    decision cascades to; ``VendorProduct.design_id`` is not consulted.
    """

    __tablename__ = "design_product_links"

    id = db.Column(db.Integer, primary_key=True)
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vendor_product_id = db.Column(
        db.Integer,
        db.ForeignKey("vendor_products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "design_id", "vendor_product_id", name="uq_design_product_link"
        ),
    )

    def __repr__(self):
        return f"<DesignProductLink design={self.design_id} product={self.vendor_product_id}>"
