"""Tests for the design store: dedup, submission and queries."""
import pytest

from printmarket.errors import InvalidState, NotFound, StorageFailure
from printmarket.models.audit_log import AuditLog
from printmarket.models.design import Design
from printmarket.services import design_service, hashing


def test_create_design_from_upload(db, blob_store, artwork):
    design = design_service.get_or_create_design(
        7, artwork, {"name": "Skull", "tags": ["dark"], "category": "illustration"}
    )

    assert design.id is not None
    assert design.validation_state == "DRAFT"
    assert design.content_hash == hashing.content_hash(artwork)
    assert design.storage_key == f"designs/7/{design.content_hash}.png"
    assert design.format == "PNG"
    assert design.dimensions == {"width": 16, "height": 16}
    assert design.tags == ["dark"]
    assert AuditLog.query.filter_by(action="DESIGN_CREATED", design_id=design.id).count() == 1


def test_reupload_reuses_design_and_uploads_once(db, blob_store, artwork):
    first = design_service.get_or_create_design(7, artwork)
    second = design_service.get_or_create_design(7, bytes(artwork), {"name": "renamed"})

    assert first.id == second.id
    assert Design.query.count() == 1
    assert blob_store.call_count == 1


def test_same_bytes_different_vendors(db, blob_store, artwork):
    a = design_service.get_or_create_design(7, artwork)
    b = design_service.get_or_create_design(8, artwork)

    assert a.id != b.id
    assert a.content_hash == b.content_hash
    assert blob_store.call_count == 2


def test_concurrent_insert_returns_winner(db, blob_store, artwork, monkeypatch):
    winner = design_service.get_or_create_design(7, artwork)
    winner_id = winner.id

    real_find = design_service._find_existing
    lookups = []

    def racing_find(vendor_id, digest):
        lookups.append(digest)
        if len(lookups) == 1:
            return None  # lookup ran before the other request committed
        return real_find(vendor_id, digest)

    monkeypatch.setattr(design_service, "_find_existing", racing_find)
    again = design_service.get_or_create_design(7, artwork)

    assert again.id == winner_id
    assert Design.query.count() == 1
    assert len(lookups) == 2


def test_storage_failure_creates_no_row(db, blob_store, artwork):
    blob_store.side_effect = StorageFailure("bucket unavailable")

    with pytest.raises(StorageFailure):
        design_service.get_or_create_design(7, artwork)
    assert Design.query.count() == 0


def test_invalid_bytes_not_uploaded(db, blob_store):
    with pytest.raises(ValueError):
        design_service.get_or_create_design(7, b"garbage")
    blob_store.assert_not_called()


def test_submit_moves_draft_to_pending(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork)

    submitted = design_service.submit(design.id, vendor_id=7)

    assert submitted.validation_state == "PENDING"
    assert submitted.submitted_at is not None


def test_submit_twice_is_invalid(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork)
    design_service.submit(design.id)

    with pytest.raises(InvalidState):
        design_service.submit(design.id)


def test_submit_other_vendors_design(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork)

    with pytest.raises(NotFound):
        design_service.submit(design.id, vendor_id=8)
    db.session.expire_all()
    assert db.session.get(Design, design.id).validation_state == "DRAFT"


def test_get_design_unknown(db):
    with pytest.raises(NotFound):
        design_service.get_design(999)


def test_list_designs_filters_by_state(db, blob_store, png_factory):
    a = design_service.get_or_create_design(7, png_factory((1, 1, 1)))
    design_service.get_or_create_design(7, png_factory((2, 2, 2)))
    design_service.get_or_create_design(8, png_factory((3, 3, 3)))
    design_service.submit(a.id)

    assert design_service.list_designs(7).total == 2
    pending = design_service.list_designs(7, validation_state="PENDING")
    assert [d.id for d in pending.items] == [a.id]

    with pytest.raises(ValueError):
        design_service.list_designs(7, validation_state="BOGUS")


def test_pending_queue_and_status(db, blob_store, png_factory):
    a = design_service.get_or_create_design(7, png_factory((1, 1, 1)))
    b = design_service.get_or_create_design(8, png_factory((2, 2, 2)))
    design_service.submit(a.id)
    design_service.submit(b.id)

    queue = design_service.list_pending_designs()
    assert [d.id for d in queue.items] == [a.id, b.id]

    status = design_service.validation_status(a.id)
    assert status["validation_state"] == "PENDING"
    assert status["is_validated"] is False


def test_update_design_metadata(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork, {"name": "Skull"})

    updated = design_service.update_design(
        design.id, 7, name="Skull v2", tags=[" dark ", "", "grunge"], category="illustration"
    )

    assert updated.name == "Skull v2"
    assert updated.tags == ["dark", "grunge"]
    assert updated.category == "illustration"
    assert updated.content_hash == design.content_hash
    assert AuditLog.query.filter_by(action="DESIGN_UPDATED", design_id=design.id).count() == 1


def test_update_design_rejects_unknown_fields(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork)

    with pytest.raises(ValueError):
        design_service.update_design(design.id, 7, content_hash="f" * 64)
    with pytest.raises(ValueError):
        design_service.update_design(design.id, 7)


def test_update_other_vendors_design(db, blob_store, artwork):
    design = design_service.get_or_create_design(7, artwork, {"name": "Skull"})

    with pytest.raises(NotFound):
        design_service.update_design(design.id, 8, name="Mine now")
    db.session.expire_all()
    assert db.session.get(Design, design.id).name == "Skull"


def test_delete_unused_design(db, blob_store, blob_delete, artwork):
    design = design_service.get_or_create_design(7, artwork)
    design_id, key = design.id, design.storage_key

    design_service.delete_design(design_id, 7)

    assert db.session.get(Design, design_id) is None
    blob_delete.assert_called_once_with(key)
    assert AuditLog.query.filter_by(action="DESIGN_DELETED").count() == 1


def test_delete_design_in_use_is_refused(db, make_product, blob_delete):
    product = make_product()

    with pytest.raises(InvalidState):
        design_service.delete_design(product.design_id, 5)

    db.session.expire_all()
    assert db.session.get(Design, product.design_id) is not None
    blob_delete.assert_not_called()


def test_delete_other_vendors_design(db, blob_store, blob_delete, artwork):
    design = design_service.get_or_create_design(7, artwork)

    with pytest.raises(NotFound):
        design_service.delete_design(design.id, 8)
    blob_delete.assert_not_called()


def test_delete_survives_blob_failure(db, blob_store, blob_delete, artwork):
    blob_delete.side_effect = StorageFailure("bucket unavailable")
    design = design_service.get_or_create_design(7, artwork)
    design_id = design.id

    design_service.delete_design(design_id, 7)

    assert db.session.get(Design, design_id) is None


def test_reupload_after_delete_creates_new_design(db, blob_store, blob_delete, artwork):
    design = design_service.get_or_create_design(7, artwork)
    design_service.delete_design(design.id, 7)

    again = design_service.get_or_create_design(7, artwork)

    assert Design.query.count() == 1
    assert again.validation_state == "DRAFT"
    assert blob_store.call_count == 2
