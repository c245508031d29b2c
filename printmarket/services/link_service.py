"""Design ↔ vendor product association, plus repair tooling."""
import logging
from sqlalchemy.exc import IntegrityError

from printmarket.extensions import db
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.models.design_product_link import DesignProductLink
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import design_service

logger = logging.getLogger(__name__)


def link(design_id, vendor_product_id):
    """Associate a product with its design inside the caller's transaction.

    An existing pair is left alone. Returns True when a row was added.
    """
    exists = DesignProductLink.query.filter_by(
        design_id=design_id, vendor_product_id=vendor_product_id
    ).first()
    if exists:
        logger.debug("Link already present: design %d ↔ product %d", design_id, vendor_product_id)
        return False

    try:
        with db.session.begin_nested():
            db.session.add(
                DesignProductLink(design_id=design_id, vendor_product_id=vendor_product_id)
            )
    except IntegrityError:
        # inserted by a concurrent request between the check and the insert
        logger.debug("Link raced in: design %d ↔ product %d", design_id, vendor_product_id)
        return False

    logger.info("Linked design %d ↔ product %d", design_id, vendor_product_id)
    return True


def _linked_query(design_id):
    return VendorProduct.query.join(
        DesignProductLink, DesignProductLink.vendor_product_id == VendorProduct.id
    ).filter(DesignProductLink.design_id == design_id)


def linked_products(design_id, lock=False):
    """Products linked to a design, ordered by id.

    With ``lock=True`` the product rows are locked ``FOR UPDATE`` for the
    rest of the caller's transaction.
    """
    query = _linked_query(design_id).order_by(VendorProduct.id)
    if lock:
        query = query.populate_existing().with_for_update(of=VendorProduct)
    return query.all()


def products_for(design_id, lock=False):
    """Ids of every product the design's validation decision applies to."""
    return {product.id for product in linked_products(design_id, lock=lock)}


def design_for_product(vendor_product_id):
    return (
        Design.query.join(DesignProductLink, DesignProductLink.design_id == Design.id)
        .filter(DesignProductLink.vendor_product_id == vendor_product_id)
        .first()
    )


def reconcile(actor_id=None):
    """Make sure every designed product has exactly one link row.

    Deletes links that point at a design other than the product's
    ``design_id``, and links whose design or product no longer exists.
    Creates links for products whose ``design_id`` points at an existing
    design but have no link row. Finally, products still PENDING under an
    already-decided design receive that decision. Every step is idempotent.
    """
    from printmarket.services.vendor_product_service import transition_for

    try:
        stale_ids = [
            row.id
            for row in db.session.query(DesignProductLink.id)
            .join(VendorProduct, VendorProduct.id == DesignProductLink.vendor_product_id)
            .filter(
                VendorProduct.design_id.is_(None)
                | (VendorProduct.design_id != DesignProductLink.design_id)
            )
            .all()
        ]
        orphan_ids = [
            row.id
            for row in db.session.query(DesignProductLink.id)
            .outerjoin(Design, Design.id == DesignProductLink.design_id)
            .outerjoin(VendorProduct, VendorProduct.id == DesignProductLink.vendor_product_id)
            .filter((Design.id.is_(None)) | (VendorProduct.id.is_(None)))
            .all()
        ]
        doomed = set(stale_ids) | set(orphan_ids)
        deleted = 0
        if doomed:
            deleted = (
                DesignProductLink.query.filter(DesignProductLink.id.in_(sorted(doomed)))
                .delete(synchronize_session=False)
            )

        missing = (
            db.session.query(VendorProduct.id, VendorProduct.design_id)
            .join(Design, Design.id == VendorProduct.design_id)
            .outerjoin(
                DesignProductLink,
                (DesignProductLink.vendor_product_id == VendorProduct.id)
                & (DesignProductLink.design_id == VendorProduct.design_id),
            )
            .filter(DesignProductLink.id.is_(None))
            .all()
        )
        created = 0
        for product_id, design_id in missing:
            if link(design_id, product_id):
                created += 1

        # decisions that predate a product's link never reached it
        undecided_design_ids = [
            row.design_id
            for row in db.session.query(DesignProductLink.design_id)
            .join(Design, Design.id == DesignProductLink.design_id)
            .join(VendorProduct, VendorProduct.id == DesignProductLink.vendor_product_id)
            .filter(Design.validation_state.in_(sorted(Design.TERMINAL_STATES)))
            .filter(VendorProduct.status == VendorProduct.PENDING)
            .distinct()
            .order_by(DesignProductLink.design_id)
            .all()
        ]
        cascaded = 0
        for design_id in undecided_design_ids:
            design = design_service.lock_design(design_id)
            for product in linked_products(design_id, lock=True):
                if product.status != VendorProduct.PENDING:
                    continue
                for attr, value in transition_for(design, product.post_validation_action).items():
                    setattr(product, attr, value)
                db.session.add(
                    AuditLog(
                        actor_id=actor_id,
                        action="PRODUCT_CASCADED",
                        design_id=design.id,
                        vendor_product_id=product.id,
                        payload={
                            "from": VendorProduct.PENDING,
                            "to": product.status,
                            "post_validation_action": product.post_validation_action,
                            "repair": True,
                        },
                    )
                )
                cascaded += 1

        result = {"created": created, "deleted": deleted, "cascaded": cascaded}
        if created or deleted or cascaded:
            db.session.add(AuditLog(actor_id=actor_id, action="LINKS_RECONCILED", payload=result))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Link reconciliation: %d created, %d deleted, %d products given their design's decision",
        created, deleted, cascaded,
    )
    return result


def link_stats():
    """Counts describing link coverage, for repair tooling."""
    total_links = db.session.query(db.func.count(DesignProductLink.id)).scalar()
    unique_designs = db.session.query(
        db.func.count(db.distinct(DesignProductLink.design_id))
    ).scalar()
    unique_products = db.session.query(
        db.func.count(db.distinct(DesignProductLink.vendor_product_id))
    ).scalar()
    with_design_id = VendorProduct.query.filter(VendorProduct.design_id.isnot(None)).count()
    missing_link = (
        VendorProduct.query.filter(VendorProduct.design_id.isnot(None))
        .filter(~VendorProduct.links.any())
        .count()
    )
    return {
        "total_links": total_links,
        "unique_designs": unique_designs,
        "unique_products": unique_products,
        "products_with_design_id": with_design_id,
        "products_missing_link": missing_link,
    }
