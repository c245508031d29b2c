"""Tests for design ↔ product links and the repair routine."""
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.models.design_product_link import DesignProductLink
from printmarket.models.vendor_product import VendorProduct
from printmarket.services import cascade_service, design_service, link_service


def test_create_product_creates_link(make_product):
    product = make_product()

    assert link_service.products_for(product.design_id) == {product.id}
    assert link_service.design_for_product(product.id).id == product.design_id


def test_link_is_idempotent(db, make_product):
    product = make_product()

    assert link_service.link(product.design_id, product.id) is False
    db.session.commit()
    assert DesignProductLink.query.filter_by(vendor_product_id=product.id).count() == 1


def test_products_for_uses_links_not_design_id(db, make_product):
    product = make_product()
    # a legacy row carrying design_id but never linked
    stray = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray", price=100
    )
    db.session.add(stray)
    db.session.commit()

    assert link_service.products_for(product.design_id) == {product.id}


def test_products_for_unknown_design(db):
    assert link_service.products_for(12345) == set()


def test_reconcile_creates_missing_links(db, make_product):
    product = make_product()
    stray = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray", price=100
    )
    db.session.add(stray)
    db.session.commit()

    assert link_service.link_stats()["products_missing_link"] == 1

    result = link_service.reconcile(actor_id=1)

    assert result == {"created": 1, "deleted": 0, "cascaded": 0}
    assert link_service.products_for(product.design_id) == {product.id, stray.id}
    assert link_service.link_stats()["products_missing_link"] == 0
    assert AuditLog.query.filter_by(action="LINKS_RECONCILED").count() == 1


def test_reconcile_deletes_orphaned_links(db, make_product, png_factory):
    keep = make_product(design_bytes=png_factory((10, 10, 10)))
    doomed = make_product(design_bytes=png_factory((20, 20, 20)))
    doomed_design_id = doomed.design_id

    # bypass ORM cascades to simulate rows deleted out from under the links
    db.session.execute(db.delete(Design).where(Design.id == doomed_design_id))
    db.session.commit()

    result = link_service.reconcile()

    assert result["deleted"] == 1
    assert DesignProductLink.query.filter_by(design_id=doomed_design_id).count() == 0
    assert link_service.products_for(keep.design_id) == {keep.id}


def test_reconcile_is_idempotent(db, make_product):
    make_product()

    assert link_service.reconcile() == {"created": 0, "deleted": 0, "cascaded": 0}
    assert link_service.reconcile() == {"created": 0, "deleted": 0, "cascaded": 0}


def test_link_stats(db, make_product, artwork):
    first = make_product(design_bytes=artwork)
    make_product(design_id=first.design_id, name="Second on same design")

    stats = link_service.link_stats()

    assert stats["total_links"] == 2
    assert stats["unique_designs"] == 1
    assert stats["unique_products"] == 2
    assert stats["products_with_design_id"] == 2


def test_reconcile_applies_decision_to_late_linked_products(db, make_product, queue):
    product = make_product(action="AUTO_PUBLISH")
    design_service.submit(product.design_id)
    cascade_service.decide(product.design_id, "VALIDATE", actor_id=1)

    published = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray", price=100,
        post_validation_action="AUTO_PUBLISH",
    )
    drafted = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray draft",
        price=100, post_validation_action="TO_DRAFT",
    )
    db.session.add_all([published, drafted])
    db.session.commit()

    result = link_service.reconcile(actor_id=1)

    assert result == {"created": 2, "deleted": 0, "cascaded": 2}
    db.session.expire_all()
    published = db.session.get(VendorProduct, published.id)
    drafted = db.session.get(VendorProduct, drafted.id)
    assert (published.status, published.is_validated) == ("PUBLISHED", True)
    assert (drafted.status, drafted.is_validated) == ("DRAFT", True)
    assert published.validated_at is not None
    assert link_service.reconcile() == {"created": 0, "deleted": 0, "cascaded": 0}


def test_reconcile_applies_rejection_to_late_linked_products(db, make_product, queue):
    product = make_product()
    design_service.submit(product.design_id)
    cascade_service.decide(product.design_id, "REJECT", reason="blurry", actor_id=1)

    stray = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray", price=100
    )
    db.session.add(stray)
    db.session.commit()

    assert link_service.reconcile()["cascaded"] == 1

    db.session.expire_all()
    stray = db.session.get(VendorProduct, stray.id)
    assert stray.status == "REJECTED"
    assert stray.rejection_reason == "blurry"


def test_reconcile_leaves_open_designs_pending(db, make_product):
    product = make_product()
    stray = VendorProduct(
        vendor_id=5, base_product_id=42, design_id=product.design_id, name="Stray", price=100
    )
    db.session.add(stray)
    db.session.commit()

    assert link_service.reconcile()["cascaded"] == 0
    db.session.expire_all()
    assert db.session.get(VendorProduct, stray.id).status == "PENDING"


def test_reconcile_replaces_stale_link(db, make_product, png_factory):
    moved = make_product(design_bytes=png_factory((10, 10, 10)))
    other = make_product(design_bytes=png_factory((20, 20, 20)))
    old_design_id = moved.design_id

    # design_id repointed without touching the link table
    moved.design_id = other.design_id
    db.session.commit()

    result = link_service.reconcile()

    assert result["deleted"] == 1
    assert result["created"] == 1
    links = DesignProductLink.query.filter_by(vendor_product_id=moved.id).all()
    assert [link.design_id for link in links] == [other.design_id]
    assert link_service.products_for(old_design_id) == set()
    assert link_service.products_for(other.design_id) == {moved.id, other.id}
