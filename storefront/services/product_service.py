import logging

from flask import current_app
from rq import Retry
from sqlalchemy.exc import IntegrityError

from storefront import extensions
from storefront.errors import InvalidOperation, NotFound
from storefront.extensions import db
from storefront.models.category import Category
from storefront.models.image import ProductImage
from storefront.models.product import (
    BASE_PRODUCT,
    STANDALONE,
    VARIANT,
    VARIANT_BASED,
    Product,
)
from storefront.models.variant import ProductColor, ProductSize
from storefront.services import image_service, product_type_service, storage_service

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "name", "description", "note", "quantity", "category_id")


def validate_category(category_id):
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category with ID {category_id} not found")
    return category


def get_product(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound(f"Product with ID {product_id} not found")
    return product


def list_products(category_id=None, product_type=None, sold_out=None, page=1, per_page=24):
    """Base products for the catalog, newest first."""
    query = Product.query.filter_by(record_type=BASE_PRODUCT)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if product_type:
        query = query.filter(Product.product_type == product_type)
    if sold_out is not None:
        query = query.filter(Product.sold_out.is_(sold_out))
    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_variants(base_product_id):
    base = get_product(base_product_id)
    if not base.is_base:
        raise InvalidOperation(f"Product {base_product_id} is a variant, not a base product")
    if base.product_type == VARIANT_BASED:
        product_type_service.assert_has_variants(base.id)
    return [v for v in base.variants if v.record_type == VARIANT]


def _size_rows(sizes):
    return [ProductSize(size=str(s["size"]), price=float(s["price"])) for s in sizes]


def _color_rows(colors):
    return [ProductColor(color=str(c["color"])) for c in colors]


def _upload_images(files, label):
    """Validate and upload files, returning unsaved ProductImage rows."""
    payloads = image_service.read_uploads(files, current_app.config["MAX_PRODUCT_IMAGES"])
    if not payloads:
        return []
    urls = storage_service.upload_files(payloads)
    return [
        ProductImage(url=url, alt=f"{label} image {index + 1}", sort_order=index)
        for index, url in enumerate(urls)
    ]


def _commit_with_images(new_images):
    """Commit the session; remove freshly uploaded objects if that fails."""
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        if new_images:
            storage_service.delete_by_urls([img.url for img in new_images])
        raise


def _sync_sold_out(product):
    if product.is_variant and product.is_standalone:
        product.sold_out = product.parent.sold_out
        return
    product.sold_out = product.quantity == 0
    # Standalone variants sell out with the parent that holds their stock.
    if product.is_standalone and product.is_base:
        for variant in product.variants:
            variant.sold_out = product.sold_out


def create_base(data, files=None):
    """Create a STANDALONE or VARIANT_BASED base product."""
    validate_category(data["category_id"])

    default_type, record_type = product_type_service.get_defaults()
    product_type = data.get("product_type") or default_type
    if product_type == STANDALONE:
        product_type_service.validate_standalone_create(
            product_type=product_type, record_type=record_type, parent_product_id=None
        )
    else:
        product_type_service.validate_variant_based_base_create(
            product_type=product_type, record_type=record_type, parent_product_id=None
        )

    images = _upload_images(files, "Product")

    product = Product(
        title=data["title"],
        name=data["name"],
        description=data.get("description"),
        note=data.get("note"),
        quantity=data["quantity"],
        category_id=data["category_id"],
        product_type=product_type,
        record_type=record_type,
        sold_out=data["quantity"] == 0,
        sizes=_size_rows(data.get("sizes") or []),
        colors=_color_rows(data.get("colors") or []),
        images=images,
    )
    db.session.add(product)
    _commit_with_images(images)

    logger.info("Created %s base product %d: %s", product_type, product.id, product.title)
    return product


def create_variant(parent_product_id, data, files=None):
    """Create an explicitly stocked variant under a VARIANT_BASED base."""
    parent = get_product(parent_product_id)

    product_type_service.validate_variant_create(
        product_type=parent.product_type,
        record_type=VARIANT,
        parent_product_id=parent.id,
    )

    images = _upload_images(files, "Variant")

    variant = Product(
        title=data["title"],
        name=data["name"],
        description=data.get("description"),
        note=data.get("note"),
        quantity=data["quantity"],
        price=data["price"],
        size=data["size"],
        color=data.get("color"),
        category_id=parent.category_id,
        product_type=VARIANT_BASED,
        record_type=VARIANT,
        parent_product_id=parent.id,
        sold_out=data["quantity"] == 0,
        images=images,
    )
    db.session.add(variant)
    _commit_with_images(images)

    logger.info("Created variant %d under base %d: %s", variant.id, parent.id, variant.title)
    return variant


def _validate_patch(product, patch):
    if patch.get("category_id") is not None:
        if product.is_variant and patch["category_id"] != product.parent.category_id:
            raise InvalidOperation(
                "Variants inherit their category. Update the base product instead."
            )
        validate_category(patch["category_id"])

    new_type = patch.get("product_type")
    if new_type is not None and new_type != product.product_type:
        if product.parent_product_id is not None:
            raise InvalidOperation(
                "Cannot change productType on a variant record. "
                "Update the base product instead."
            )
        product_type_service.validate_product_type_consistency(
            product.id, new_type, product.record_type
        )

    if product.is_variant and product.is_standalone:
        if "quantity" in patch:
            raise InvalidOperation(
                "Standalone variants carry no stock. Update the base product quantity instead."
            )
        if "size" in patch or "color" in patch:
            raise InvalidOperation("Size and color of a standalone variant are fixed")

    if product.is_base and any(k in patch for k in ("price", "size", "color")):
        raise InvalidOperation(
            "Base products have no own price, size or color. Use sizes/colors instead."
        )
    if product.is_variant and any(k in patch for k in ("sizes", "colors")):
        raise InvalidOperation(
            "Variants have no size or color options. Update the base product instead."
        )


def _apply_patch(product, patch):
    if patch.get("product_type") is not None:
        product.product_type = patch["product_type"]

    for field in UPDATABLE_FIELDS + ("price", "size", "color"):
        if field in patch:
            setattr(product, field, patch[field])

    if "category_id" in patch and product.is_base:
        for variant in product.variants:
            variant.category_id = product.category_id

    # Flush the deletes before inserting so unique (product_id, size) holds.
    if patch.get("sizes") is not None:
        product.sizes.clear()
        db.session.flush()
        product.sizes.extend(_size_rows(patch["sizes"]))
    if patch.get("colors") is not None:
        product.colors.clear()
        db.session.flush()
        product.colors.extend(_color_rows(patch["colors"]))

    _sync_sold_out(product)


def update(product_id, patch, files=None):
    """Apply a partial update.

    Sizes and colors, when given, replace the existing rows wholesale.
    New image files replace all existing images; without files the
    images are left alone.
    """
    product = get_product(product_id)
    _validate_patch(product, patch)

    new_images = _upload_images(files, "Product")
    old_urls = []
    try:
        _apply_patch(product, patch)
        if new_images:
            old_urls = [img.url for img in product.images]
            product.images.clear()
            db.session.flush()
            product.images.extend(new_images)
        db.session.commit()
    except Exception:
        db.session.rollback()
        if new_images:
            storage_service.delete_by_urls([img.url for img in new_images])
        raise

    # Replaced objects go only once nothing references them anymore.
    _queue_purge(old_urls)

    logger.info(
        "Updated product %d (fields=%s, replaced_images=%d)",
        product.id,
        sorted(patch),
        len(old_urls),
    )
    return product


def _find_standalone_variant(base_product_id, variant_key):
    return Product.query.filter_by(
        parent_product_id=base_product_id,
        record_type=VARIANT,
        variant_key=variant_key,
    ).first()


def get_or_create_standalone_variant(base_product_id, size, color=None):
    """Return the variant for (base, size, color), creating it on first use.

    Lookup and creation are keyed on the unique (parent_product_id,
    variant_key) pair, so a concurrent creator that loses the insert race
    re-reads the winner's row instead of failing.
    """
    base = db.session.get(Product, base_product_id)
    if base is None:
        raise NotFound(f"Product with ID {base_product_id} not found")
    if base.product_type != STANDALONE:
        raise InvalidOperation(
            "get_or_create_standalone_variant is only for STANDALONE products. "
            "Use variant ID directly for VARIANT_BASED products."
        )
    if not base.is_base:
        raise InvalidOperation(f"Product {base_product_id} is already a variant")

    product_size = base.find_size(size)
    if product_size is None:
        raise InvalidOperation(f'Size "{size}" is not available for this product')

    color_value = color or None
    if color_value and base.colors:
        match = next(
            (c for c in base.colors if c.color.lower() == color_value.lower()), None
        )
        if match is None:
            raise InvalidOperation(f'Color "{color_value}" is not available for this product')
        color_value = match.color

    variant_key = Product.make_variant_key(size, color_value)
    variant = _find_standalone_variant(base.id, variant_key)
    if variant is not None:
        return variant

    suffix = f"{size} - {color_value}" if color_value else size
    name_suffix = f"{size}-{color_value}" if color_value else size
    variant = Product(
        title=f"{base.title} - {suffix}",
        name=f"{base.name}-{name_suffix}",
        description=base.description,
        note=base.note,
        quantity=0,  # stock lives on the base
        price=product_size.price,
        size=size,
        color=color_value,
        category_id=base.category_id,
        product_type=STANDALONE,
        record_type=VARIANT,
        parent_product_id=base.id,
        variant_key=variant_key,
        sold_out=base.sold_out,
    )
    db.session.add(variant)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        variant = _find_standalone_variant(base_product_id, variant_key)
        if variant is None:
            raise
        logger.info("Lost variant creation race for %d/%s", base_product_id, variant_key)
        return variant

    logger.info("Materialized standalone variant %d for base %d (%s)", variant.id, base.id, variant_key)
    return variant


def _queue_purge(urls):
    if not urls:
        return
    from storefront.workers.image_cleanup import purge_images

    extensions.task_queue.enqueue(purge_images, urls, retry=Retry(max=3))


def _collect_image_urls(product):
    urls = [img.url for img in product.images]
    for variant in product.variants:
        urls.extend(img.url for img in variant.images)
    return urls


def remove(product_id):
    product = get_product(product_id)

    if product.parent_product_id is not None and product.product_type == VARIANT_BASED:
        siblings = product_type_service.count_variants(
            product.parent_product_id, exclude_id=product.id
        )
        if siblings == 0:
            raise InvalidOperation(
                "Cannot delete the last variant. Variant-based products must "
                "have at least one variant."
            )

    image_urls = _collect_image_urls(product)
    db.session.delete(product)  # cascades to variants, options, images, cart lines
    db.session.commit()

    _queue_purge(image_urls)

    logger.info("Deleted product %d (%d images queued for purge)", product_id, len(image_urls))
    return image_urls


def get_stats():
    """Product counts by (product_type, record_type) for the stats command."""
    rows = (
        db.session.query(Product.product_type, Product.record_type, db.func.count(Product.id))
        .group_by(Product.product_type, Product.record_type)
        .all()
    )
    return {(pt, rt): count for pt, rt, count in rows}
