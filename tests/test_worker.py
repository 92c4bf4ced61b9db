"""Tests for the image purge job."""
from unittest.mock import patch

import pytest

from storefront.errors import StorageError
from storefront.workers.image_cleanup import purge_images


def test_purge_images_deletes_urls(app):
    urls = ["https://cdn.example.test/products/a.jpg"]
    with patch("storefront.workers.image_cleanup.storage_service") as mock_storage:
        assert purge_images(urls) == 1
        mock_storage.delete_by_urls.assert_called_once_with(urls)


def test_purge_images_noop_for_empty_list(app):
    with patch("storefront.workers.image_cleanup.storage_service") as mock_storage:
        assert purge_images([]) == 0
        mock_storage.delete_by_urls.assert_not_called()


def test_purge_images_reraises_for_retry(app):
    with patch("storefront.workers.image_cleanup.storage_service") as mock_storage:
        mock_storage.delete_by_urls.side_effect = StorageError("down")
        with pytest.raises(StorageError):
            purge_images(["https://cdn.example.test/products/a.jpg"])
