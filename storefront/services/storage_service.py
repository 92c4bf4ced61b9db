import logging
import uuid

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)
from flask import current_app

from storefront.errors import StorageError, StorageTimeout

logger = logging.getLogger(__name__)


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(
            signature_version="s3v4",
            connect_timeout=current_app.config["STORAGE_CONNECT_TIMEOUT"],
            read_timeout=current_app.config["STORAGE_READ_TIMEOUT"],
            retries={
                "max_attempts": current_app.config["STORAGE_MAX_ATTEMPTS"],
                "mode": "standard",
            },
        ),
    )


def _translate(error, action):
    if isinstance(error, (ConnectTimeoutError, ReadTimeoutError)):
        return StorageTimeout(f"Object storage timed out during {action}")
    return StorageError(f"Object storage {action} failed")


def get_public_url(storage_key):
    """Return the public CDN URL for a storage key."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    return f"{base}/{storage_key}"


def key_from_url(url):
    """Inverse of get_public_url; None for URLs we did not issue."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/") + "/"
    if not url or not url.startswith(base):
        return None
    return url[len(base):]


def upload(storage_key, data, content_type="image/jpeg"):
    """Upload bytes to S3 as a public object."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    client.put_object(
        Bucket=bucket,
        Key=storage_key,
        Body=data,
        ContentType=content_type,
        ACL="public-read",
    )


def upload_files(payloads, folder=None):
    """Upload JPEG payloads and return their public URLs in input order.

    All-or-nothing: if any upload fails, the objects already written in
    this batch are removed before the error is raised.
    """
    folder = folder or current_app.config["STORAGE_FOLDER"]
    uploaded = []
    try:
        for data in payloads:
            storage_key = f"{folder}/{uuid.uuid4().hex}.jpg"
            upload(storage_key, data)
            uploaded.append(storage_key)
    except (BotoCoreError, ClientError) as e:
        logger.exception(
            "Upload failed after %d of %d files", len(uploaded), len(payloads)
        )
        if uploaded:
            try:
                delete_many(uploaded)
            except (BotoCoreError, ClientError):
                logger.exception("Rollback of partial upload failed: %s", uploaded)
        raise _translate(e, "upload") from e

    return [get_public_url(k) for k in uploaded]


def delete_many(storage_keys):
    """Delete multiple objects from S3."""
    if not storage_keys:
        return
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    objects = [{"Key": k} for k in storage_keys]
    client.delete_objects(
        Bucket=bucket,
        Delete={"Objects": objects},
    )


def delete_by_urls(urls):
    """Delete the objects behind a list of public URLs."""
    keys = []
    for url in urls:
        key = key_from_url(url)
        if key is None:
            logger.warning("Skipping delete of foreign URL: %s", url)
            continue
        keys.append(key)
    if not keys:
        return
    try:
        delete_many(keys)
    except (BotoCoreError, ClientError) as e:
        logger.exception("Delete failed for %d objects", len(keys))
        raise _translate(e, "delete") from e
