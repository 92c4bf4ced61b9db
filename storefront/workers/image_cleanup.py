"""RQ worker job: remove a deleted product's images from object storage."""
import logging
from flask import current_app, has_app_context
from storefront import create_app
from storefront.services import storage_service

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
        _worker_app = create_app()
    return _worker_app


def purge_images(urls):
    """Delete stored objects behind ``urls``.

    Enqueued after the product rows are gone, so nothing references the
    objects anymore. Failures are re-raised for RQ to retry.
    """
    if not urls:
        return 0
    app = _get_app()
    with app.app_context():
        logger.info("Purging %d product images", len(urls))
        try:
            storage_service.delete_by_urls(urls)
        except Exception:
            logger.exception("Image purge failed for %d urls", len(urls))
            raise  # let RQ handle retry
    return len(urls)
