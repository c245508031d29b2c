"""Vendor product lifecycle: creation, post-validation preference, publishing."""
import logging
from flask import current_app

from printmarket.errors import InvalidState, LockedState, NotFound
from printmarket.extensions import db
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import catalog_service, design_service, link_service

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "description", "price", "stock", "sizes", "colors")


def transition_for(design, action):
    """Product validation fields implied by a design's current state.

    Returns a dict of ``status``, ``is_validated``, ``validated_at`` and
    ``rejection_reason``. Open designs keep the product PENDING.
    """
    if design.validation_state == Design.VALIDATED:
        return {
            "status": (
                VendorProduct.PUBLISHED
                if action == VendorProduct.AUTO_PUBLISH
                else VendorProduct.DRAFT
            ),
            "is_validated": True,
            "validated_at": design.validated_at,
            "rejection_reason": None,
        }
    if design.validation_state == Design.REJECTED:
        return {
            "status": VendorProduct.REJECTED,
            "is_validated": False,
            "validated_at": design.validated_at,
            "rejection_reason": design.rejection_reason,
        }
    return {
        "status": VendorProduct.PENDING,
        "is_validated": False,
        "validated_at": None,
        "rejection_reason": None,
    }


def _check_action(action):
    if action not in VendorProduct.ACTIONS:
        raise ValueError(
            f"post_validation_action must be one of {sorted(VendorProduct.ACTIONS)}"
        )


def create_product(
    vendor_id,
    base_product_id,
    design_bytes=None,
    design_id=None,
    post_validation_action=None,
    design_metadata=None,
    **fields,
):
    """Create a vendor product on top of a (possibly reused) design.

    Exactly one of ``design_bytes`` or ``design_id`` must be given. The
    product row, its link row and the audit entry are committed together.
    If the design has already been decided, the product starts in the
    decided state rather than PENDING.
    """
    if (design_bytes is None) == (design_id is None):
        raise ValueError("Provide exactly one of design_bytes or design_id")

    action = post_validation_action or current_app.config["DEFAULT_POST_VALIDATION_ACTION"]
    _check_action(action)
    unknown = set(fields) - set(PRODUCT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown product fields: {sorted(unknown)}")
    if not fields.get("name"):
        raise ValueError("Product name is required")
    if fields.get("price") is None or fields["price"] < 0:
        raise ValueError("Product price must be a non-negative amount")

    if design_bytes is not None:
        design = design_service.get_or_create_design(vendor_id, design_bytes, design_metadata)
    else:
        design = design_service.get_design(design_id, vendor_id=vendor_id)

    # Network call stays outside the write transaction
    snapshot = catalog_service.get_base_product(base_product_id)

    try:
        design = design_service.lock_design(design.id)
        initial = transition_for(design, action)

        product = VendorProduct(
            vendor_id=vendor_id,
            base_product_id=base_product_id,
            design_id=design.id,
            name=fields["name"],
            description=fields.get("description") or "",
            price=fields["price"],
            stock=fields.get("stock") or 0,
            sizes=fields.get("sizes") or [],
            colors=fields.get("colors") or [],
            base_name=snapshot["name"],
            base_price=snapshot["price"],
            base_images=snapshot["images"],
            base_sizes=snapshot["sizes"],
            post_validation_action=action,
            **initial,
        )
        db.session.add(product)
        db.session.flush()  # get product.id

        link_service.link(design.id, product.id)

        db.session.add(
            AuditLog(
                actor_id=vendor_id,
                action="PRODUCT_CREATED",
                design_id=design.id,
                vendor_product_id=product.id,
                payload={
                    "base_product_id": base_product_id,
                    "post_validation_action": action,
                    "status": product.status,
                },
            )
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Created product %d on design %d for vendor %s [%s]",
        product.id, design.id, vendor_id, product.status,
    )
    return product


def get_product(product_id, vendor_id=None):
    product = db.session.get(VendorProduct, product_id)
    if not product or (vendor_id is not None and product.vendor_id != vendor_id):
        raise NotFound(f"Product {product_id} not found")
    return product


def _lock_product(product_id, vendor_id=None):
    product = (
        VendorProduct.query.filter_by(id=product_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not product or (vendor_id is not None and product.vendor_id != vendor_id):
        raise NotFound(f"Product {product_id} not found")
    return product


def set_post_validation_action(product_id, action, vendor_id=None):
    """Change what happens to the product when its design is validated.

    Only allowed while the design is DRAFT or PENDING; the design row is
    locked so the edit cannot interleave with a decision.
    """
    _check_action(action)
    try:
        product = _lock_product(product_id, vendor_id)
        if product.design_id is None:
            raise InvalidState(f"Product {product_id} has no design")
        design = design_service.lock_design(product.design_id)
        if not design.accepts_preference_changes:
            raise LockedState(
                f"Design {design.id} is {design.validation_state}; "
                "post-validation action can no longer change",
                state=design.validation_state,
            )

        old_action = product.post_validation_action
        product.post_validation_action = action
        db.session.add(
            AuditLog(
                actor_id=product.vendor_id,
                action="SET_POST_VALIDATION_ACTION",
                design_id=design.id,
                vendor_product_id=product.id,
                payload={"old": old_action, "new": action},
            )
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Product %d post-validation action → %s", product.id, action)
    return product


def publish_validated_product(product_id, vendor_id=None):
    """Manually publish a validated draft (DRAFT → PUBLISHED)."""
    try:
        product = _lock_product(product_id, vendor_id)
        if not product.is_validated or product.status != VendorProduct.DRAFT:
            raise InvalidState(
                f"Product {product_id} is {product.status}; only validated drafts can be published",
                status=product.status,
            )
        product.status = VendorProduct.PUBLISHED
        db.session.add(
            AuditLog(
                actor_id=product.vendor_id,
                action="PRODUCT_PUBLISHED",
                design_id=product.design_id,
                vendor_product_id=product.id,
            )
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Product %d published manually", product.id)
    return product


def list_products(vendor_id, status=None, page=1, per_page=20):
    query = VendorProduct.query.filter_by(vendor_id=vendor_id)
    if status:
        if status not in VendorProduct.VALID_STATUSES:
            raise ValueError(f"Unknown product status: {status}")
        query = query.filter_by(status=status)
    query = query.order_by(VendorProduct.created_at.desc(), VendorProduct.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_stats():
    """Product counts by status."""
    rows = (
        db.session.query(VendorProduct.status, db.func.count(VendorProduct.id))
        .group_by(VendorProduct.status)
        .all()
    )
    return dict(rows)
