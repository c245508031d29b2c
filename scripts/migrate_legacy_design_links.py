#!/usr/bin/env python3
"""One-time migration: attach legacy products to their designs.

Products imported before design links existed only carry the artwork URL
in ``legacy_design_url``. For each such product without a ``design_id``,
find the same vendor's design stored at that URL, set ``design_id`` and
create the link row. Run once, then use ``flask reconcile-links`` for
ongoing repair.

Usage:
    python scripts/migrate_legacy_design_links.py [--dry-run]
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from printmarket import create_app
from printmarket.extensions import db
from printmarket.models.design import Design
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import link_service
from printmarket.services.vendor_product_service import transition_for

app = create_app()


def migrate(dry_run=False):
    with app.app_context():
        products = VendorProduct.query.filter(
            VendorProduct.design_id.is_(None),
            VendorProduct.legacy_design_url.isnot(None),
        ).all()
        print(f"Products to migrate: {len(products)}")

        migrated = 0
        unmatched = 0
        for product in products:
            design = Design.query.filter_by(
                vendor_id=product.vendor_id, storage_url=product.legacy_design_url
            ).first()
            if not design:
                unmatched += 1
                print(f"  No design for product {product.id} ({product.legacy_design_url})")
                continue

            if not dry_run:
                product.design_id = design.id
                link_service.link(design.id, product.id)
                if design.is_terminal and product.status == VendorProduct.PENDING:
                    # the decision predates the link; apply it now
                    for attr, value in transition_for(design, product.post_validation_action).items():
                        setattr(product, attr, value)
            migrated += 1
            print(f"  Product {product.id} → design {design.id}")

        if dry_run:
            db.session.rollback()
        else:
            db.session.commit()
        print(f"\nMigrated {migrated} products, {unmatched} without a matching design.")


if __name__ == "__main__":
    migrate(dry_run="--dry-run" in sys.argv[1:])
