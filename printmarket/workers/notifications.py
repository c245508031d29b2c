"""RQ worker job: deliver design decision notifications."""
import logging
from flask import current_app, has_app_context

from printmarket.services import notification_service

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        from printmarket import create_app

        _worker_app = create_app()
    return _worker_app


def deliver_decision(payload):
    """Send a cascade result to the notification sink.

    Failures propagate so RQ can retry; the cascade itself has already
    committed and is unaffected.
    """
    app = _get_app()
    with app.app_context():
        try:
            delivered = notification_service.post_webhook(payload)
        except Exception:
            logger.exception(
                "Notification delivery failed for design %s", payload.get("design_id")
            )
            raise  # let RQ handle retry

        if delivered:
            logger.info(
                "Notified decision %s on design %s (%d products)",
                payload.get("decision"),
                payload.get("design_id"),
                len(payload.get("updated_product_ids", [])),
            )
        return delivered
