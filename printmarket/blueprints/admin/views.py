"""Admin review queue, design decisions and link repair endpoints."""
from flask import request

from printmarket.blueprints import current_admin_id, page_args, paginated
from printmarket.blueprints.admin import admin_bp
from printmarket.schemas import Decision
from printmarket.services import (
    cascade_service,
    design_service,
    link_service,
    vendor_product_service,
)


@admin_bp.before_request
def require_admin():
    current_admin_id()


@admin_bp.route("/designs/pending")
def pending_designs():
    page, per_page = page_args()
    return paginated(design_service.list_pending_designs(page=page, per_page=per_page), "designs")


@admin_bp.route("/designs/<int:design_id>/status")
def design_status(design_id):
    return design_service.validation_status(design_id)


@admin_bp.route("/designs/<int:design_id>/decision", methods=["POST"])
def decide(design_id):
    """Validate or reject a pending design and cascade to its products."""
    payload = Decision.model_validate(request.get_json(silent=True) or {})
    result = cascade_service.decide(
        design_id,
        payload.decision,
        reason=payload.reason,
        actor_id=current_admin_id(),
    )
    return {
        "design": result.design.to_dict(),
        "decision": result.decision,
        "updated_product_ids": result.updated_product_ids,
        "outcomes": cascade_service.count_by_outcome(result.updated_product_ids),
    }


@admin_bp.route("/designs/<int:design_id>/products")
def design_products(design_id):
    design = design_service.get_design(design_id)
    products = link_service.linked_products(design.id)
    return {
        "design": design.to_dict(),
        "products": [p.to_dict() for p in products],
    }


@admin_bp.route("/links/stats")
def link_stats():
    return link_service.link_stats()


@admin_bp.route("/links/reconcile", methods=["POST"])
def reconcile_links():
    return link_service.reconcile(actor_id=current_admin_id())


@admin_bp.route("/products/stats")
def product_stats():
    return {"by_status": vendor_product_service.get_stats()}
