"""Tests for content hashing and artwork inspection."""
import io

import pytest
from PIL import Image as PILImage

from printmarket.services import hashing, image_service


def test_hash_is_deterministic(artwork):
    assert hashing.content_hash(artwork) == hashing.content_hash(bytes(artwork))
    assert len(hashing.content_hash(artwork)) == 64


def test_hash_changes_with_content(png_factory):
    assert hashing.content_hash(png_factory((1, 2, 3))) != hashing.content_hash(
        png_factory((1, 2, 4))
    )


def test_hash_rejects_text():
    with pytest.raises(TypeError):
        hashing.content_hash("not bytes")


def test_inspect_png(app, png_factory):
    info = image_service.inspect_design(png_factory(size=(30, 20)))
    assert info["format"] == "PNG"
    assert info["content_type"] == "image/png"
    assert info["extension"] == "png"
    assert (info["width"], info["height"]) == (30, 20)


def test_inspect_rejects_garbage(app):
    with pytest.raises(ValueError, match="Invalid image"):
        image_service.inspect_design(b"definitely not an image")


def test_inspect_rejects_empty(app):
    with pytest.raises(ValueError, match="empty"):
        image_service.inspect_design(b"")


def test_inspect_rejects_oversized(app, monkeypatch, artwork):
    monkeypatch.setitem(app.config, "MAX_DESIGN_BYTES", 10)
    with pytest.raises(ValueError, match="too large"):
        image_service.inspect_design(artwork)


def test_inspect_rejects_unsupported_format(app):
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4)).save(buffer, format="GIF")
    with pytest.raises(ValueError, match="Unsupported"):
        image_service.inspect_design(buffer.getvalue())
