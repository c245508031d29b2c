"""Design store: content-addressed, per-vendor deduplicated artwork."""
import logging
from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError

from printmarket.errors import ConstraintViolation, InvalidState, NotFound, StorageFailure
from printmarket.extensions import db
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import hashing, image_service, storage_service

logger = logging.getLogger(__name__)


def _find_existing(vendor_id, digest):
    return Design.query.filter_by(vendor_id=vendor_id, content_hash=digest).first()


def get_or_create_design(vendor_id, data, metadata=None):
    """Return the vendor's design for these bytes, creating it on first upload.

    Re-uploading identical bytes returns the existing row without touching
    the blob store. The upload happens before the insert transaction; a
    unique-constraint race with a concurrent upload resolves to the row
    that won.
    """
    metadata = metadata or {}
    digest = hashing.content_hash(data)

    existing = _find_existing(vendor_id, digest)
    if existing:
        logger.info("Reusing design %d for vendor %s (hash %s)", existing.id, vendor_id, digest[:12])
        return existing

    info = image_service.inspect_design(data)
    url, key = storage_service.upload_design(
        vendor_id, digest, data, info["content_type"], info["extension"]
    )

    design = Design(
        vendor_id=vendor_id,
        content_hash=digest,
        storage_url=url,
        storage_key=key,
        byte_size=info["byte_size"],
        format=info["format"],
        dimensions={"width": info["width"], "height": info["height"]},
        name=metadata.get("name") or "",
        description=metadata.get("description") or "",
        tags=metadata.get("tags") or [],
        category=metadata.get("category"),
        validation_state=Design.DRAFT,
    )
    db.session.add(design)
    try:
        db.session.flush()
        db.session.add(
            AuditLog(
                actor_id=vendor_id,
                action="DESIGN_CREATED",
                design_id=design.id,
                payload={"content_hash": digest, "storage_key": key},
            )
        )
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        winner = _find_existing(vendor_id, digest)
        if winner is None:
            raise ConstraintViolation(
                "Design insert conflicted but no existing design was found",
                vendor_id=vendor_id,
            ) from e
        logger.info(
            "Concurrent upload for vendor %s resolved to design %d", vendor_id, winner.id
        )
        return winner

    logger.info("Created design %d for vendor %s (hash %s)", design.id, vendor_id, digest[:12])
    return design


def get_design(design_id, vendor_id=None):
    """Fetch a design, optionally scoped to its owning vendor."""
    design = db.session.get(Design, design_id)
    if not design or (vendor_id is not None and design.vendor_id != vendor_id):
        raise NotFound(f"Design {design_id} not found")
    return design


def lock_design(design_id):
    """Load a design with a row lock for the current transaction."""
    design = (
        Design.query.filter_by(id=design_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not design:
        raise NotFound(f"Design {design_id} not found")
    return design


def submit(design_id, vendor_id=None):
    """Submit a draft design for admin review (DRAFT → PENDING)."""
    try:
        design = lock_design(design_id)
        if vendor_id is not None and design.vendor_id != vendor_id:
            raise NotFound(f"Design {design_id} not found")
        if design.validation_state != Design.DRAFT:
            raise InvalidState(
                f"Design {design_id} is {design.validation_state}, only DRAFT designs can be submitted",
                state=design.validation_state,
            )

        design.validation_state = Design.PENDING
        design.submitted_at = datetime.now(timezone.utc)
        db.session.add(
            AuditLog(
                actor_id=design.vendor_id,
                action="DESIGN_SUBMITTED",
                design_id=design.id,
            )
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Design %d submitted for validation", design.id)
    return design


def list_designs(vendor_id, validation_state=None, page=1, per_page=20):
    """Vendor's designs, newest first, optionally filtered by state."""
    query = Design.query.filter_by(vendor_id=vendor_id)
    if validation_state:
        if validation_state not in Design.STATES:
            raise ValueError(f"Unknown validation state: {validation_state}")
        query = query.filter_by(validation_state=validation_state)
    query = query.order_by(Design.created_at.desc(), Design.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def list_pending_designs(page=1, per_page=20):
    """Admin review queue, oldest submission first."""
    query = Design.query.filter_by(validation_state=Design.PENDING).order_by(
        Design.submitted_at.asc(), Design.id.asc()
    )
    return query.paginate(page=page, per_page=per_page, error_out=False)


def validation_status(design_id):
    design = get_design(design_id)
    return {
        "id": design.id,
        "name": design.name,
        "validation_state": design.validation_state,
        "is_validated": design.validation_state == Design.VALIDATED,
        "rejection_reason": design.rejection_reason,
        "validated_at": design.validated_at.isoformat() if design.validated_at else None,
    }


EDITABLE_FIELDS = ("name", "description", "tags", "category")


def update_design(design_id, vendor_id, **changes):
    """Edit a design's descriptive metadata. The artwork itself is immutable."""
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown design fields: {sorted(unknown)}")
    if not changes:
        raise ValueError("Nothing to update")

    try:
        design = get_design(design_id, vendor_id=vendor_id)
        if "name" in changes:
            design.name = changes["name"] or ""
        if "description" in changes:
            design.description = changes["description"] or ""
        if "tags" in changes:
            design.tags = [t.strip() for t in changes["tags"] or [] if t and t.strip()]
        if "category" in changes:
            design.category = changes["category"] or None
        db.session.add(
            AuditLog(
                actor_id=vendor_id,
                action="DESIGN_UPDATED",
                design_id=design.id,
                payload={"fields": sorted(changes)},
            )
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Design %d metadata updated (%s)", design.id, ", ".join(sorted(changes)))
    return design


def delete_design(design_id, vendor_id):
    """Delete an unused design and its blob.

    Refused with ``InvalidState`` while any product still uses the design.
    The row is removed first; a blob that cannot be deleted afterwards is
    only logged, since nothing references it any more.
    """
    try:
        design = lock_design(design_id)
        if design.vendor_id != vendor_id:
            raise NotFound(f"Design {design_id} not found")

        in_use = max(
            design.links.count(),
            VendorProduct.query.filter_by(design_id=design.id).count(),
        )
        if in_use:
            raise InvalidState(
                f"Design {design_id} is used by {in_use} products and cannot be deleted",
                products=in_use,
            )

        storage_key = design.storage_key
        db.session.add(
            AuditLog(
                actor_id=vendor_id,
                action="DESIGN_DELETED",
                payload={
                    "design_id": design.id,
                    "content_hash": design.content_hash,
                    "storage_key": storage_key,
                },
            )
        )
        db.session.delete(design)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    try:
        storage_service.delete(storage_key)
    except StorageFailure:
        logger.warning("Blob %s left behind by deleted design %d", storage_key, design_id)

    logger.info("Design %d deleted by vendor %s", design_id, vendor_id)
