"""JSON shapes returned by the API."""
from storefront.services import product_type_service


def _ts(value):
    return value.isoformat() if value else None


def category_to_dict(category):
    return {
        "id": category.id,
        "name": category.name,
        "created_at": _ts(category.created_at),
    }


def image_to_dict(image):
    return {"id": image.id, "url": image.url, "alt": image.alt, "order": image.sort_order}


def product_summary(product):
    """Compact form used inside carts and orders."""
    first = product.first_image
    return {
        "id": product.id,
        "title": product.title,
        "name": product.name,
        "price": product.price,
        "size": product.size,
        "color": product.color,
        "product_type": product.product_type,
        "record_type": product.record_type,
        "parent_product_id": product.parent_product_id,
        "sold_out": product.sold_out,
        "image": image_to_dict(first) if first else None,
    }


def product_to_dict(product, include_variants=False):
    data = {
        "id": product.id,
        "title": product.title,
        "name": product.name,
        "description": product.description,
        "note": product.note,
        "quantity": product.quantity,
        "price": product.price,
        "size": product.size,
        "color": product.color,
        "category_id": product.category_id,
        "category": category_to_dict(product.category) if product.category else None,
        "product_type": product.product_type,
        "record_type": product.record_type,
        "parent_product_id": product.parent_product_id,
        "sold_out": product.sold_out,
        "purchasable": product_type_service.is_purchasable(product),
        "sizes": [{"id": s.id, "size": s.size, "price": s.price} for s in product.sizes],
        "colors": [{"id": c.id, "color": c.color} for c in product.colors],
        "images": [image_to_dict(img) for img in product.images],
        "created_at": _ts(product.created_at),
        "updated_at": _ts(product.updated_at),
    }
    if include_variants:
        data["variants"] = [product_to_dict(v) for v in product.variants]
    return data


def cart_item_to_dict(item):
    product = item.product
    summary = product_summary(product)
    summary["category"] = category_to_dict(product.category) if product.category else None
    summary["parent"] = product_summary(product.parent) if product.parent else None
    # Options come from the base for standalone variants.
    owner = product.parent if product.parent is not None else product
    summary["sizes"] = [{"size": s.size, "price": s.price} for s in owner.sizes]
    summary["colors"] = [c.color for c in owner.colors]
    return {
        "id": item.id,
        "product_id": item.product_id,
        "size": item.size,
        "quantity": item.quantity,
        "price": item.price,
        "line_total": item.line_total,
        "product": summary,
    }


def cart_to_dict(cart):
    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "items": [cart_item_to_dict(item) for item in cart.items],
        "item_count": cart.item_count,
        "total": cart.total,
        "created_at": _ts(cart.created_at),
        "updated_at": _ts(cart.updated_at),
    }


def order_to_dict(order):
    return {
        "id": order.id,
        "user_id": order.user_id,
        "cart_id": order.cart_id,
        "status": order.status,
        "total_amount": order.total_amount,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "title": item.title,
                "size": item.size,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ],
        "created_at": _ts(order.created_at),
    }


def promotion_to_dict(promotion):
    return {
        "id": promotion.id,
        "title": promotion.title,
        "image_url": promotion.image_url,
        "description": promotion.description,
        "appearance_date": _ts(promotion.appearance_date),
        "close_date": _ts(promotion.close_date),
        "is_active": promotion.is_active,
        "created_at": _ts(promotion.created_at),
    }


def news_to_dict(news):
    return {
        "id": news.id,
        "title": news.title,
        "content": news.content,
        "link": news.link,
        "is_active": news.is_active,
        "order": news.sort_order,
        "created_at": _ts(news.created_at),
    }


def about_us_to_dict(row):
    return {"about_us": row.value, "updated_at": _ts(row.updated_at)}


def user_to_dict(user):
    return {
        "id": user.id,
        "email": user.email,
        "mobile_number": user.mobile_number,
        "created_at": _ts(user.created_at),
    }
