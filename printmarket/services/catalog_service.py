"""Read-only client for the admin catalog of base products."""
import logging
import httpx
from flask import current_app

from printmarket.errors import CatalogFailure, NotFound

logger = logging.getLogger(__name__)


def _url(path):
    return f"{current_app.config['CATALOG_API_URL'].rstrip('/')}/{path.lstrip('/')}"


def get_base_product(base_product_id):
    """Fetch a base product snapshot: ``{name, price, images, sizes}``."""
    try:
        resp = httpx.get(
            _url(f"/products/{base_product_id}"),
            timeout=current_app.config["CATALOG_TIMEOUT"],
        )
    except httpx.HTTPError as e:
        logger.error("Catalog request failed for base product %s: %s", base_product_id, e)
        raise CatalogFailure("Catalog service unavailable") from e

    if resp.status_code == 404:
        raise NotFound(f"Base product {base_product_id} not found")
    if resp.is_error:
        logger.error(
            "Catalog error for base product %s: HTTP %s", base_product_id, resp.status_code
        )
        raise CatalogFailure(f"Catalog service returned {resp.status_code}")

    data = resp.json()
    return {
        "name": data.get("name", ""),
        "price": data.get("price"),
        "images": data.get("images") or [],
        "sizes": data.get("sizes") or [],
    }
