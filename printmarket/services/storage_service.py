import logging
import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from printmarket.errors import StorageFailure

logger = logging.getLogger(__name__)


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def design_key(vendor_id, digest, extension):
    """Content-addressed key: identical uploads land on the same object."""
    return f"designs/{vendor_id}/{digest}.{extension}"


def upload(storage_key, data, content_type="image/png"):
    """Upload bytes to S3."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        client.put_object(
            Bucket=bucket,
            Key=storage_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
    except (BotoCoreError, ClientError) as e:
        logger.exception("Blob upload failed for %s", storage_key)
        raise StorageFailure("Design upload failed", storage_key=storage_key) from e


def upload_design(vendor_id, digest, data, content_type, extension):
    """Upload design artwork and return ``(url, key)``."""
    key = design_key(vendor_id, digest, extension)
    upload(key, data, content_type=content_type)
    return get_public_url(key), key


def get_public_url(storage_key):
    """Return the public CDN URL for a storage key."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    return f"{base}/{storage_key}"


def delete(storage_key):
    """Delete an object from S3."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        client.delete_object(Bucket=bucket, Key=storage_key)
    except (BotoCoreError, ClientError) as e:
        logger.exception("Blob delete failed for %s", storage_key)
        raise StorageFailure("Design delete failed", storage_key=storage_key) from e
