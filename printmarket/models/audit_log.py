from datetime import datetime, timezone
from printmarket.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.BigInteger, nullable=True, index=True)
    action = db.Column(db.String(50), nullable=False)
    design_id = db.Column(
        db.Integer,
        db.ForeignKey("designs.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    vendor_product_id = db.Column(
        db.Integer,
        db.ForeignKey("vendor_products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "DESIGN_CREATED",
        "DESIGN_UPDATED",
        "DESIGN_DELETED",
        "DESIGN_SUBMITTED",
        "DESIGN_VALIDATED",
        "DESIGN_REJECTED",
        "PRODUCT_CREATED",
        "PRODUCT_CASCADED",
        "SET_POST_VALIDATION_ACTION",
        "PRODUCT_PUBLISHED",
        "LINKS_RECONCILED",
    }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.actor_id}>"
