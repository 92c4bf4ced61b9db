"""Tests for catalog operations: base products, variants, updates, deletes."""
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from storefront import extensions
from storefront.errors import (
    Conflict,
    InvalidOperation,
    NotFound,
    StorageError,
    ValidationError,
)
from storefront.models.category import Category
from storefront.models.image import ProductImage
from storefront.models.product import Product
from storefront.models.variant import ProductColor, ProductSize
from storefront.services import product_service


def test_create_standalone_base(make_standalone):
    shirt = make_standalone()

    assert shirt.product_type == "STANDALONE"
    assert shirt.record_type == "BASE_PRODUCT"
    assert shirt.parent_product_id is None
    assert shirt.sold_out is False
    assert [(s.size, s.price) for s in shirt.sizes] == [("M", 25), ("S", 20)]
    assert sorted(c.color for c in shirt.colors) == ["Blue", "Red"]


def test_create_base_defaults_to_standalone(category):
    product = product_service.create_base(
        {"title": "Mug", "name": "mug", "quantity": 0, "category_id": category.id}
    )
    assert product.product_type == "STANDALONE"
    assert product.sold_out is True


def test_create_base_unknown_category(db):
    with pytest.raises(NotFound, match="Category"):
        product_service.create_base(
            {"title": "Mug", "name": "mug", "quantity": 1, "category_id": 404}
        )


def test_create_base_uploads_images_in_order(category, storage, make_upload):
    product = product_service.create_base(
        {"title": "Hat", "name": "hat", "quantity": 2, "category_id": category.id},
        files=[make_upload("a.png"), make_upload("b.png")],
    )

    assert [img.url for img in product.images] == storage.uploaded
    assert [img.sort_order for img in product.images] == [0, 1]
    assert product.images[0].alt == "Product image 1"


def test_create_base_rejects_invalid_image_before_upload(category, storage, make_upload):
    with pytest.raises(ValidationError):
        product_service.create_base(
            {"title": "Hat", "name": "hat", "quantity": 2, "category_id": category.id},
            files=[make_upload("ok.png"), make_upload("bad.png", data=b"not an image")],
        )
    assert storage.uploaded == []
    assert Product.query.count() == 0


def test_create_base_fails_wholesale_on_upload_error(category, storage, make_upload):
    storage.fail_upload = True
    with pytest.raises(StorageError):
        product_service.create_base(
            {
                "title": "Hat",
                "name": "hat",
                "quantity": 2,
                "category_id": category.id,
                "sizes": [{"size": "M", "price": 10}],
            },
            files=[make_upload()],
        )
    assert Product.query.count() == 0
    assert ProductSize.query.count() == 0


def test_create_variant_inherits_category(make_variant_family):
    shoe, (shoe_9,) = make_variant_family()

    assert shoe_9.record_type == "VARIANT"
    assert shoe_9.product_type == "VARIANT_BASED"
    assert shoe_9.parent_product_id == shoe.id
    assert shoe_9.category_id == shoe.category_id
    assert shoe_9.price == 50
    assert shoe_9.quantity == 3
    assert shoe_9.sold_out is False
    assert shoe_9.variant_key is None


def test_create_variant_out_of_stock_is_sold_out(make_variant_family):
    _, (variant,) = make_variant_family(variants=(("8", 0, 40),))
    assert variant.sold_out is True


def test_create_variant_under_standalone_rejected(make_standalone):
    shirt = make_standalone()
    with pytest.raises(InvalidOperation):
        product_service.create_variant(
            shirt.id,
            {"title": "x", "name": "x", "quantity": 1, "size": "M", "price": 1},
        )


def test_create_variant_missing_parent(db):
    with pytest.raises(NotFound):
        product_service.create_variant(
            12345,
            {"title": "x", "name": "x", "quantity": 1, "size": "M", "price": 1},
        )


def test_get_or_create_standalone_variant(make_standalone):
    shirt = make_standalone()

    variant = product_service.get_or_create_standalone_variant(shirt.id, "M")

    assert variant.title == "Shirt - M"
    assert variant.name == "shirt-M"
    assert variant.price == 25
    assert variant.quantity == 0
    assert variant.color is None
    assert variant.record_type == "VARIANT"
    assert variant.product_type == "STANDALONE"
    assert variant.parent_product_id == shirt.id
    assert variant.category_id == shirt.category_id
    assert variant.sold_out == shirt.sold_out


def test_get_or_create_standalone_variant_is_idempotent(make_standalone):
    shirt = make_standalone()
    before = Product.query.count()

    first = product_service.get_or_create_standalone_variant(shirt.id, "M", "Red")
    second = product_service.get_or_create_standalone_variant(shirt.id, "M", "Red")

    assert first.id == second.id
    assert Product.query.count() == before + 1
    assert first.title == "Shirt - M - Red"


def test_get_or_create_matches_color_case_insensitively(make_standalone):
    shirt = make_standalone()

    upper = product_service.get_or_create_standalone_variant(shirt.id, "M", "RED")
    lower = product_service.get_or_create_standalone_variant(shirt.id, "M", "red")

    assert upper.id == lower.id
    assert upper.color == "Red"


def test_get_or_create_distinguishes_colors(make_standalone):
    shirt = make_standalone()
    red = product_service.get_or_create_standalone_variant(shirt.id, "M", "Red")
    plain = product_service.get_or_create_standalone_variant(shirt.id, "M")
    assert red.id != plain.id


def test_get_or_create_rejects_unknown_options(make_standalone):
    shirt = make_standalone()
    with pytest.raises(InvalidOperation, match='"XL"'):
        product_service.get_or_create_standalone_variant(shirt.id, "XL")
    with pytest.raises(InvalidOperation, match='"Green"'):
        product_service.get_or_create_standalone_variant(shirt.id, "M", "Green")


def test_get_or_create_accepts_any_color_when_none_declared(make_standalone):
    shirt = make_standalone(colors=[])
    variant = product_service.get_or_create_standalone_variant(shirt.id, "S", "Teal")
    assert variant.color == "Teal"


def test_get_or_create_requires_standalone_base(make_variant_family):
    shoe, _ = make_variant_family()
    with pytest.raises(InvalidOperation, match="STANDALONE"):
        product_service.get_or_create_standalone_variant(shoe.id, "9")
    with pytest.raises(NotFound):
        product_service.get_or_create_standalone_variant(999, "9")


def test_get_or_create_recovers_from_insert_race(make_standalone, db):
    shirt = make_standalone()
    winner = product_service.get_or_create_standalone_variant(shirt.id, "S")
    winner_id = winner.id

    # First lookup misses as if the other request had not committed yet.
    with patch.object(
        product_service,
        "_find_standalone_variant",
        side_effect=[None, winner],
    ):
        variant = product_service.get_or_create_standalone_variant(shirt.id, "S")

    assert variant.id == winner_id
    assert Product.query.filter_by(parent_product_id=shirt.id).count() == 1


def test_update_recomputes_sold_out(make_standalone):
    shirt = make_standalone()

    product_service.update(shirt.id, {"quantity": 0})
    assert shirt.sold_out is True

    product_service.update(shirt.id, {"quantity": 4})
    assert shirt.sold_out is False

    product_service.update(shirt.id, {"title": "Shirt v2"})
    assert shirt.sold_out is False
    assert shirt.quantity == 4


def test_update_base_quantity_propagates_to_standalone_variants(make_standalone):
    shirt = make_standalone()
    variant = product_service.get_or_create_standalone_variant(shirt.id, "M")

    product_service.update(shirt.id, {"quantity": 0})

    assert variant.sold_out is True
    assert variant.quantity == 0


def test_update_replaces_sizes_and_colors_wholesale(make_standalone, db):
    shirt = make_standalone()

    product_service.update(
        shirt.id,
        {"sizes": [{"size": "M", "price": 30}, {"size": "XL", "price": 35}], "colors": []},
    )

    assert [(s.size, s.price) for s in shirt.sizes] == [("M", 30), ("XL", 35)]
    assert shirt.colors == []
    assert ProductSize.query.filter_by(product_id=shirt.id).count() == 2
    assert ProductColor.query.filter_by(product_id=shirt.id).count() == 0


def test_update_leaves_options_alone_when_absent(make_standalone):
    shirt = make_standalone()
    product_service.update(shirt.id, {"note": "restocked"})
    assert len(shirt.sizes) == 2
    assert len(shirt.colors) == 2


def test_update_replaces_images_when_files_given(
    category, storage, make_upload, monkeypatch
):
    queue = MagicMock()
    monkeypatch.setattr(extensions, "task_queue", queue)
    product = product_service.create_base(
        {"title": "Hat", "name": "hat", "quantity": 2, "category_id": category.id},
        files=[make_upload(), make_upload()],
    )
    old_urls = [img.url for img in product.images]

    product_service.update(product.id, {}, files=[make_upload()])

    assert storage.deleted == []
    assert queue.enqueue.call_args.args[1] == old_urls
    assert [img.url for img in product.images] == [storage.uploaded[-1]]
    assert ProductImage.query.filter_by(product_id=product.id).count() == 1


def test_update_without_files_keeps_images(category, storage, make_upload):
    product = product_service.create_base(
        {"title": "Hat", "name": "hat", "quantity": 2, "category_id": category.id},
        files=[make_upload()],
    )
    product_service.update(product.id, {"quantity": 1})
    assert len(product.images) == 1
    assert storage.deleted == []


def test_update_unknown_product_or_category(make_standalone):
    shirt = make_standalone()
    with pytest.raises(NotFound):
        product_service.update(999, {"title": "x"})
    with pytest.raises(NotFound, match="Category"):
        product_service.update(shirt.id, {"category_id": 999})


def test_update_category_moves_variants(make_variant_family, db):
    shoe, (shoe_9,) = make_variant_family()
    other = Category(name="Footwear")
    db.session.add(other)
    db.session.commit()

    product_service.update(shoe.id, {"category_id": other.id})

    assert shoe_9.category_id == other.id


def test_update_product_type_on_variant_rejected(make_variant_family):
    _, (shoe_9,) = make_variant_family()
    with pytest.raises(InvalidOperation, match="variant record"):
        product_service.update(shoe_9.id, {"product_type": "STANDALONE"})


def test_update_product_type_to_standalone_with_variants_conflicts(make_variant_family):
    shoe, _ = make_variant_family()
    with pytest.raises(Conflict):
        product_service.update(shoe.id, {"product_type": "STANDALONE"})
    assert shoe.product_type == "VARIANT_BASED"


def test_update_product_type_without_children(make_standalone):
    shirt = make_standalone()
    product_service.update(shirt.id, {"product_type": "VARIANT_BASED"})
    assert shirt.product_type == "VARIANT_BASED"


def test_update_same_product_type_is_noop_check(make_standalone):
    shirt = make_standalone()
    product_service.get_or_create_standalone_variant(shirt.id, "M")
    product_service.update(shirt.id, {"product_type": "STANDALONE", "title": "Tee"})
    assert shirt.title == "Tee"


def test_update_standalone_variant_stock_rejected(make_standalone):
    shirt = make_standalone()
    variant = product_service.get_or_create_standalone_variant(shirt.id, "M")
    with pytest.raises(InvalidOperation, match="base product quantity"):
        product_service.update(variant.id, {"quantity": 3})


def test_update_variant_price(make_variant_family):
    _, (shoe_9,) = make_variant_family()
    product_service.update(shoe_9.id, {"price": 60, "quantity": 0})
    assert shoe_9.price == 60
    assert shoe_9.sold_out is True


def test_remove_last_variant_rejected(make_variant_family):
    shoe, (shoe_9,) = make_variant_family()
    with pytest.raises(InvalidOperation, match="last variant"):
        product_service.remove(shoe_9.id)
    assert Product.query.filter_by(id=shoe_9.id).count() == 1


def test_remove_one_of_several_variants(make_variant_family):
    shoe, (shoe_9, shoe_10) = make_variant_family(
        variants=(("9", 3, 50), ("10", 2, 55))
    )

    product_service.remove(shoe_9.id)

    assert Product.query.filter_by(parent_product_id=shoe.id).count() == 1
    assert Product.query.filter_by(id=shoe_10.id).count() == 1


def test_remove_missing_product(db):
    with pytest.raises(NotFound):
        product_service.remove(404)


def test_remove_base_cascades_and_queues_image_purge(
    category, storage, make_upload, monkeypatch
):
    queue = MagicMock()
    monkeypatch.setattr(extensions, "task_queue", queue)
    shirt = product_service.create_base(
        {
            "title": "Shirt",
            "name": "shirt",
            "quantity": 3,
            "category_id": category.id,
            "sizes": [{"size": "M", "price": 25}],
        },
        files=[make_upload()],
    )
    product_service.get_or_create_standalone_variant(shirt.id, "M")
    shirt_id = shirt.id

    urls = product_service.remove(shirt_id)

    assert urls == storage.uploaded
    assert Product.query.count() == 0
    assert ProductSize.query.count() == 0
    queue.enqueue.assert_called_once()
    assert queue.enqueue.call_args.args[1] == urls


def test_get_variants(make_variant_family, make_standalone, category):
    shoe, variants = make_variant_family(variants=(("9", 3, 50), ("10", 1, 50)))
    assert [v.id for v in product_service.get_variants(shoe.id)] == [v.id for v in variants]

    shirt = make_standalone()
    assert product_service.get_variants(shirt.id) == []

    empty = product_service.create_base(
        {
            "title": "Boot",
            "name": "boot",
            "quantity": 0,
            "category_id": category.id,
            "product_type": "VARIANT_BASED",
        }
    )
    with pytest.raises(InvalidOperation):
        product_service.get_variants(empty.id)


def test_list_products_only_returns_bases(make_standalone, make_variant_family):
    make_standalone()
    make_variant_family()

    page = product_service.list_products()
    assert {p.record_type for p in page.items} == {"BASE_PRODUCT"}
    assert page.total == 2

    only_vb = product_service.list_products(product_type="VARIANT_BASED")
    assert [p.title for p in only_vb.items] == ["Shoe"]


def test_get_stats(make_standalone, make_variant_family):
    make_standalone()
    make_variant_family()
    stats = product_service.get_stats()
    assert stats[("STANDALONE", "BASE_PRODUCT")] == 1
    assert stats[("VARIANT_BASED", "VARIANT")] == 1


def test_update_keeps_old_images_when_commit_fails(
    category, storage, make_upload, monkeypatch, db
):
    queue = MagicMock()
    monkeypatch.setattr(extensions, "task_queue", queue)
    product = product_service.create_base(
        {"title": "Hat", "name": "hat", "quantity": 2, "category_id": category.id},
        files=[make_upload()],
    )
    product_id = product.id
    old_url = product.images[0].url

    failing_commit = patch.object(
        db.session, "commit", side_effect=SQLAlchemyError("commit failed")
    )
    with failing_commit, pytest.raises(SQLAlchemyError):
        product_service.update(product_id, {"title": "Cap"}, files=[make_upload()])

    restored = db.session.get(Product, product_id)
    assert [img.url for img in restored.images] == [old_url]
    assert restored.title == "Hat"
    assert old_url not in storage.deleted
    assert storage.deleted == [storage.uploaded[-1]]
    queue.enqueue.assert_not_called()


def test_update_standalone_variant_zero_quantity_rejected(make_standalone):
    shirt = make_standalone()
    variant = product_service.get_or_create_standalone_variant(shirt.id, "M")
    with pytest.raises(InvalidOperation, match="base product quantity"):
        product_service.update(variant.id, {"quantity": 0})
    assert variant.quantity == 0
    assert variant.sold_out is False


def test_update_variant_options_rejected(make_variant_family, make_standalone):
    _, (shoe_9,) = make_variant_family()
    with pytest.raises(InvalidOperation, match="no size or color options"):
        product_service.update(shoe_9.id, {"sizes": [{"size": "9", "price": 1}]})
    with pytest.raises(InvalidOperation, match="no size or color options"):
        product_service.update(shoe_9.id, {"colors": [{"color": "Red"}]})

    shirt = make_standalone()
    variant = product_service.get_or_create_standalone_variant(shirt.id, "S")
    with pytest.raises(InvalidOperation):
        product_service.update(variant.id, {"colors": []})
    assert ProductSize.query.filter_by(product_id=shoe_9.id).count() == 0
