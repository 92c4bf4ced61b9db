import logging

from storefront.errors import NotFound
from storefront.extensions import db
from storefront.models.news import News

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content", "link", "is_active")


def _ordered(query):
    return query.order_by(News.sort_order.asc(), News.created_at.desc(), News.id.desc())


def create_news(data):
    news = News(
        title=data["title"],
        content=data.get("content"),
        link=data.get("link"),
        is_active=data.get("is_active", True),
        sort_order=data.get("order", 0),
    )
    db.session.add(news)
    db.session.commit()
    logger.info("Created news %d: %s", news.id, news.title)
    return news


def list_news(include_inactive=False):
    query = News.query
    if not include_inactive:
        query = query.filter_by(is_active=True)
    return _ordered(query).all()


def list_active_news():
    return list_news(include_inactive=False)


def get_news(news_id):
    news = db.session.get(News, news_id)
    if news is None:
        raise NotFound(f"News with ID {news_id} not found")
    return news


def update_news(news_id, patch):
    news = get_news(news_id)
    for field in UPDATABLE_FIELDS:
        if field in patch:
            setattr(news, field, patch[field])
    if "order" in patch:
        news.sort_order = patch["order"]
    db.session.commit()
    logger.info("Updated news %d (fields=%s)", news.id, sorted(patch))
    return news


def delete_news(news_id):
    news = get_news(news_id)
    db.session.delete(news)
    db.session.commit()
    logger.info("Deleted news %d", news_id)


def toggle_news(news_id):
    news = get_news(news_id)
    news.is_active = not news.is_active
    db.session.commit()
    logger.info("News %d is_active=%s", news.id, news.is_active)
    return news
