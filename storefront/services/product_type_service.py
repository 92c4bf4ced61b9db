"""Product type / record type consistency rules.

A single ``products`` table holds three kinds of rows. The only legal
shapes are::

    product_type   record_type    parent         purchasable
    STANDALONE     BASE_PRODUCT   none           no
    STANDALONE     VARIANT        standalone     yes   (lazily created, stock on parent)
    VARIANT_BASED  BASE_PRODUCT   none           no
    VARIANT_BASED  VARIANT        variant-based  yes   (own stock and price)

Every create/update/delete in the catalog and every add-to-cart passes
through the checks below before touching the database.
"""
from storefront.errors import Conflict, InvalidOperation, NotFound
from storefront.extensions import db
from storefront.models.product import (
    BASE_PRODUCT,
    STANDALONE,
    VARIANT,
    VARIANT_BASED,
    Product,
)

# (product_type, record_type) -> whether a parent is required
LEGAL_COMBINATIONS = {
    (STANDALONE, BASE_PRODUCT): False,
    (STANDALONE, VARIANT): True,
    (VARIANT_BASED, BASE_PRODUCT): False,
    (VARIANT_BASED, VARIANT): True,
}


def check_combination(product_type, record_type, parent_product_id):
    """Reject any (type, record type, parent) triple outside the legal table."""
    if product_type not in Product.PRODUCT_TYPES:
        raise InvalidOperation(f"Unknown productType {product_type!r}")
    if record_type not in Product.RECORD_TYPES:
        raise InvalidOperation(f"Unknown recordType {record_type!r}")

    needs_parent = LEGAL_COMBINATIONS[(product_type, record_type)]
    if needs_parent and parent_product_id is None:
        raise InvalidOperation(f"{product_type} {record_type} must have parentProductId")
    if not needs_parent and parent_product_id is not None:
        raise InvalidOperation(f"{product_type} {record_type} cannot have parentProductId")


def get_defaults():
    """Type pair given to new products that don't ask for one."""
    return STANDALONE, BASE_PRODUCT


def is_purchasable(product):
    return product.record_type == VARIANT


def assert_purchasable(product):
    if not is_purchasable(product):
        raise InvalidOperation(
            "Only variants can be added to cart. For standalone products, "
            "select size (and color) to create a variant. For variant-based "
            "products, select a specific variant."
        )


def validate_standalone_create(product_type=None, record_type=None, parent_product_id=None):
    product_type = product_type or STANDALONE
    record_type = record_type or BASE_PRODUCT

    if product_type != STANDALONE:
        raise InvalidOperation("Standalone product must have productType STANDALONE")
    if record_type != BASE_PRODUCT:
        raise InvalidOperation("Standalone product must have recordType BASE_PRODUCT")
    if parent_product_id is not None:
        raise InvalidOperation("Standalone product cannot have parentProductId")
    check_combination(product_type, record_type, parent_product_id)


def validate_variant_based_base_create(product_type, record_type=None, parent_product_id=None):
    record_type = record_type or BASE_PRODUCT

    if product_type != VARIANT_BASED:
        raise InvalidOperation("Variant-based base must have productType VARIANT_BASED")
    if record_type != BASE_PRODUCT:
        raise InvalidOperation("Variant-based base product must have recordType BASE_PRODUCT")
    if parent_product_id is not None:
        raise InvalidOperation("Base product cannot have parentProductId")
    check_combination(product_type, record_type, parent_product_id)


def validate_variant_create(product_type, record_type, parent_product_id):
    """Check a new VARIANT_BASED variant against its parent row."""
    if product_type != VARIANT_BASED:
        raise InvalidOperation("Variant record must belong to a VARIANT_BASED product")
    if record_type != VARIANT:
        raise InvalidOperation("Variant record must have recordType VARIANT")
    if parent_product_id is None:
        raise InvalidOperation("Variant must have parentProductId")

    parent = db.session.get(Product, parent_product_id)
    if parent is None:
        raise NotFound(f"Parent product with ID {parent_product_id} not found")
    if parent.product_type != VARIANT_BASED:
        raise InvalidOperation("Parent product must be VARIANT_BASED to add variants")
    if parent.record_type != BASE_PRODUCT:
        raise InvalidOperation("Parent product must be BASE_PRODUCT (cannot nest variants)")
    check_combination(product_type, record_type, parent_product_id)


def count_variants(product_id, exclude_id=None, product_type=None):
    query = Product.query.filter_by(parent_product_id=product_id, record_type=VARIANT)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if product_type is not None:
        query = query.filter(Product.product_type == product_type)
    return query.count()


def assert_no_variants_for_standalone(product_id):
    if count_variants(product_id) > 0:
        raise Conflict(
            "Standalone products cannot have variant records. "
            "Remove variants or change product type."
        )


def assert_has_variants(product_id):
    if count_variants(product_id) == 0:
        raise InvalidOperation(
            "Variant-based product must have at least one variant before it can be used."
        )


def validate_product_type_consistency(product_id, new_product_type, new_record_type):
    """Re-check a row whose productType/recordType is being changed."""
    if new_product_type not in Product.PRODUCT_TYPES:
        raise InvalidOperation(f"Unknown productType {new_product_type!r}")

    if new_product_type == STANDALONE:
        if new_record_type != BASE_PRODUCT:
            raise InvalidOperation("Standalone product must have recordType BASE_PRODUCT")
        assert_no_variants_for_standalone(product_id)
        return

    if new_record_type == BASE_PRODUCT:
        # Children materialized while the family was standalone would no
        # longer match their parent's type.
        if count_variants(product_id, product_type=STANDALONE) > 0:
            raise Conflict(
                "Product still has standalone variants. Remove them before "
                "switching to VARIANT_BASED."
            )
        return

    product = db.session.get(Product, product_id)
    if product is not None and product.parent_product_id is not None:
        validate_variant_create(
            product_type=new_product_type,
            record_type=new_record_type,
            parent_product_id=product.parent_product_id,
        )
