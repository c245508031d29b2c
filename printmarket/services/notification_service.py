import logging
import httpx
from flask import current_app
from rq import Retry

from printmarket import extensions

logger = logging.getLogger(__name__)


def notify_decision(result):
    """Queue delivery of a cascade result. Best effort: never raises."""
    payload = result.to_payload()
    try:
        extensions.task_queue.enqueue(
            "printmarket.workers.notifications.deliver_decision",
            payload,
            retry=Retry(max=3, interval=[10, 60, 300]),
        )
    except Exception:
        logger.exception(
            "Failed to enqueue decision notification for design %s", payload["design_id"]
        )


def post_webhook(payload):
    """POST a JSON payload to the configured webhook. Returns False if unset."""
    url = current_app.config["NOTIFY_WEBHOOK_URL"]
    if not url:
        logger.info("NOTIFY_WEBHOOK_URL not set, dropping notification")
        return False
    resp = httpx.post(url, json=payload, timeout=current_app.config["NOTIFY_TIMEOUT"])
    resp.raise_for_status()
    return True
