import hashlib


def content_hash(data):
    """Hex SHA-256 of raw design bytes; the per-vendor dedup key."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("content_hash expects bytes")
    return hashlib.sha256(data).hexdigest()
