import logging

from storefront.models.settings import ABOUT_US, Settings

logger = logging.getLogger(__name__)


def get_about_us():
    return Settings.get_row(ABOUT_US)


def update_about_us(text=None):
    """Replace the about-us text; ``None`` leaves the stored text as is."""
    if text is None:
        return Settings.get_row(ABOUT_US)
    row = Settings.set(ABOUT_US, text)
    logger.info("Updated about-us text (%d chars)", len(text))
    return row
