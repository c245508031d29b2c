from datetime import datetime, timezone
from printmarket.extensions import db


class Design(db.Model):
    __tablename__ = "designs"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.BigInteger, nullable=False, index=True)
    content_hash = db.Column(db.String(64), nullable=False)  # sha256 hex
    storage_url = db.Column(db.String(1024), nullable=False)
    storage_key = db.Column(db.String(512), nullable=False)
    byte_size = db.Column(db.Integer, nullable=False)
    format = db.Column(db.String(20), nullable=False)  # PNG, JPEG, WEBP
    dimensions = db.Column(db.JSON, default=dict)  # {"width": 1200, "height": 800}
    name = db.Column(db.String(255), nullable=False, default="")
    description = db.Column(db.Text, default="")
    tags = db.Column(db.JSON, default=list)
    category = db.Column(db.String(100))
    validation_state = db.Column(
        db.String(20), nullable=False, default="DRAFT", index=True
    )
    submitted_at = db.Column(db.DateTime(timezone=True))
    validated_at = db.Column(db.DateTime(timezone=True))
    validated_by = db.Column(db.BigInteger)
    rejection_reason = db.Column(db.Text)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    links = db.relationship(
        "DesignProductLink",
        backref="design",
        lazy="dynamic",
        passive_deletes=True,
    )

    __table_args__ = (
        db.UniqueConstraint("vendor_id", "content_hash", name="uq_design_vendor_hash"),
    )

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"

    STATES = {DRAFT, PENDING, VALIDATED, REJECTED}
    OPEN_STATES = {DRAFT, PENDING}
    TERMINAL_STATES = {VALIDATED, REJECTED}

    @property
    def is_terminal(self):
        return self.validation_state in self.TERMINAL_STATES

    @property
    def accepts_preference_changes(self):
        """Products may change their post-validation action until decided."""
        return self.validation_state in self.OPEN_STATES

    def to_dict(self):
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "content_hash": self.content_hash,
            "storage_url": self.storage_url,
            "byte_size": self.byte_size,
            "format": self.format,
            "dimensions": self.dimensions or {},
            "name": self.name,
            "description": self.description or "",
            "tags": self.tags or [],
            "category": self.category,
            "validation_state": self.validation_state,
            "submitted_at": _iso(self.submitted_at),
            "validated_at": _iso(self.validated_at),
            "validated_by": self.validated_by,
            "rejection_reason": self.rejection_reason,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Design {self.id} v{self.vendor_id} [{self.validation_state}]>"


def _iso(value):
    return value.isoformat() if value else None
