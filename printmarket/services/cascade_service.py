"""Propagates an admin's validate/reject decision from a design to its products."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from printmarket.errors import InvalidState, PrintmarketError
from printmarket.extensions import db
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import design_service, link_service, notification_service
from printmarket.services.vendor_product_service import transition_for

logger = logging.getLogger(__name__)

VALIDATE = "VALIDATE"
REJECT = "REJECT"
DECISIONS = {VALIDATE, REJECT}


@dataclass
class CascadeResult:
    design: Design
    decision: str
    actor_id: int
    updated_product_ids: list = field(default_factory=list)

    def to_payload(self):
        """Notification/audit payload handed to the delivery job."""
        return {
            "design_id": self.design.id,
            "vendor_id": self.design.vendor_id,
            "decision": self.decision,
            "validation_state": self.design.validation_state,
            "rejection_reason": self.design.rejection_reason,
            "actor_id": self.actor_id,
            "updated_product_ids": list(self.updated_product_ids),
        }


def _apply_decision(product, design):
    """Write the design's terminal outcome onto one linked product."""
    previous = product.status
    for attr, value in transition_for(design, product.post_validation_action).items():
        setattr(product, attr, value)
    db.session.add(
        AuditLog(
            actor_id=design.validated_by,
            action="PRODUCT_CASCADED",
            design_id=design.id,
            vendor_product_id=product.id,
            payload={
                "from": previous,
                "to": product.status,
                "post_validation_action": product.post_validation_action,
            },
        )
    )


def decide(design_id, decision, reason=None, actor_id=None):
    """Validate or reject a PENDING design and cascade to every linked product.

    The design update and all product updates commit in one transaction;
    any failure rolls the whole cascade back and leaves the design PENDING.
    A second decision on the same design raises ``InvalidState``.
    """
    if decision not in DECISIONS:
        raise ValueError(f"decision must be one of {sorted(DECISIONS)}")
    reason = (reason or "").strip() or None
    if decision == REJECT and not reason:
        raise ValueError("A rejection reason is required to reject a design")

    try:
        design = design_service.lock_design(design_id)
        if design.validation_state != Design.PENDING:
            raise InvalidState(
                f"Design {design_id} is {design.validation_state}; only PENDING designs can be decided",
                state=design.validation_state,
            )

        now = datetime.now(timezone.utc)
        design.validation_state = Design.VALIDATED if decision == VALIDATE else Design.REJECTED
        design.validated_at = now
        design.validated_by = actor_id
        design.rejection_reason = reason if decision == REJECT else None

        products = link_service.linked_products(design.id, lock=True)
        for product in products:
            _apply_decision(product, design)

        db.session.add(
            AuditLog(
                actor_id=actor_id,
                action="DESIGN_VALIDATED" if decision == VALIDATE else "DESIGN_REJECTED",
                design_id=design.id,
                payload={
                    "reason": design.rejection_reason,
                    "product_ids": [p.id for p in products],
                },
            )
        )
        db.session.commit()
    except PrintmarketError:
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        logger.exception("Cascade for design %s aborted; nothing was applied", design_id)
        raise

    result = CascadeResult(
        design=design,
        decision=decision,
        actor_id=actor_id,
        updated_product_ids=[p.id for p in products],
    )
    logger.info(
        "Design %d %s by %s; cascaded to %d products",
        design.id, design.validation_state, actor_id, len(result.updated_product_ids),
    )

    notification_service.notify_decision(result)
    return result


def count_by_outcome(product_ids):
    """Status breakdown of a set of products, for admin summaries."""
    if not product_ids:
        return {}
    rows = (
        db.session.query(VendorProduct.status, db.func.count(VendorProduct.id))
        .filter(VendorProduct.id.in_(list(product_ids)))
        .group_by(VendorProduct.status)
        .all()
    )
    return dict(rows)
