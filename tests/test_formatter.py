import pytest

from catalog_sync.config import SyncOptions
from catalog_sync.magento.models import MagentoProduct
from catalog_sync.models import Family, ProductStatus
from catalog_sync.sync.formatter import ProductFormatter, format_family
from conftest import MEDIA_BASE


def _configurable(records, *children):
    return Family(parent=records["parent"], children=[records[c] for c in children])


def test_configurable_family(records, maps, options):
    product = format_family(_configurable(records, "red", "blue"), maps, options)

    assert product.title == "Acme Tee"
    assert product.sku == "TEE"
    assert product.vendor == "Acme"
    assert product.description_html == "<p>Soft cotton tee</p>"
    assert product.product_type == "Apparel"
    assert product.tags == ["3", "4"]
    assert product.status == ProductStatus.ACTIVE
    assert product.existing_destination_id is None

    assert [(o.name, o.value_names()) for o in product.options] == [("Color", ["Red", "Blue"])]

    red, blue = product.variants
    assert (red.sku, red.price) == ("TEE-RED", "20")
    assert (blue.sku, blue.price) == ("TEE-BLUE", "20.5")
    assert [(p.option_name, p.value_name) for p in red.option_values] == [("Color", "Red")]
    assert [(p.option_name, p.value_name) for p in blue.option_values] == [("Color", "Blue")]
    assert red.media.url == f"{MEDIA_BASE}/t/e/tee-red.jpg"
    assert red.media.alt_text == "Acme Tee - Red"

    assert [m.alt_text for m in product.media] == ["Acme Tee - Red", "Acme Tee - Blue"]


def test_metafields_use_labels_and_skip_deny_list(records, maps, options):
    product = format_family(_configurable(records, "red", "blue"), maps, options)

    assert [m.key for m in product.metafields] == ["Brand", "Description", "Categories", "Product Type"]
    assert {m.namespace for m in product.metafields} == {"magento_import"}
    categories = next(m for m in product.metafields if m.key == "Categories")
    assert categories.value == "3,4,3"


def test_option_values_are_those_present_on_variants(records, maps, options):
    product = format_family(_configurable(records, "red"), maps, options)

    # a single remaining value no longer distinguishes anything
    assert product.options == []
    assert product.variants[0].option_values == []


def test_single_value_option_is_dropped_from_variants(raw_records, maps, options):
    raw_records["parent"]["extension_attributes"]["configurable_product_options"].append(
        {"attribute_id": 142, "label": "Size", "values": [{"value_index": 20}, {"value_index": 21}]}
    )
    family = Family(
        parent=MagentoProduct.model_validate(raw_records["parent"]),
        children=[MagentoProduct.model_validate(raw_records["red"]), MagentoProduct.model_validate(raw_records["blue"])],
    )
    product = format_family(family, maps, options)

    assert product.option_names() == ["Color"]
    for v in product.variants:
        assert [p.option_name for p in v.option_values] == ["Color"]


def test_every_variant_value_is_declared_on_the_product(records, maps, options):
    product = format_family(_configurable(records, "red", "blue"), maps, options)
    declared = {(o.name, v) for o in product.options for v in o.value_names()}

    for variant in product.variants:
        assert [p.option_name for p in variant.option_values] == product.option_names()
        for p in variant.option_values:
            assert (p.option_name, p.value_name) in declared


def test_unknown_option_value_falls_back_to_raw_value(raw_records, maps, options):
    raw_records["blue"]["custom_attributes"][0]["value"] = "77"
    family = Family(
        parent=MagentoProduct.model_validate(raw_records["parent"]),
        children=[MagentoProduct.model_validate(raw_records["red"]), MagentoProduct.model_validate(raw_records["blue"])],
    )
    product = format_family(family, maps, options)
    assert product.options[0].value_names() == ["Red", "77"]


def test_child_without_gallery_has_no_media(raw_records, maps, options):
    raw_records["blue"]["media_gallery_entries"] = []
    family = Family(
        parent=MagentoProduct.model_validate(raw_records["parent"]),
        children=[MagentoProduct.model_validate(raw_records["red"]), MagentoProduct.model_validate(raw_records["blue"])],
    )
    product = format_family(family, maps, options)
    assert product.variants[1].media is None
    assert len(product.media) == 1


def test_configurable_without_children(records, maps, options):
    product = format_family(Family(parent=records["parent"], children=[]), maps, options)
    assert product.variants == []
    assert product.options == []
    assert product.media == []


def test_standalone_record(records, maps, options):
    product = format_family(Family(children=[records["standalone"]]), maps, options)

    assert product.title == "Solo Mug"
    assert product.vendor == "Mugs Inc"
    assert product.tags == ["7"]
    assert product.options == []
    assert len(product.variants) == 1
    variant = product.variants[0]
    assert (variant.sku, variant.price) == ("MUG", "9.99")
    assert variant.option_values == []
    assert variant.media.alt_text == "Solo Mug"
    assert [(m.url, m.alt_text) for m in product.media] == [
        (f"{MEDIA_BASE}/m/u/mug.jpg", "Solo Mug"),
        (f"{MEDIA_BASE}/m/u/mug-side.jpg", "side"),
    ]


def test_disabled_record_is_draft(raw_records, maps, options):
    raw_records["standalone"]["status"] = 2
    product = format_family(Family(children=[MagentoProduct.model_validate(raw_records["standalone"])]), maps, options)
    assert product.status == ProductStatus.DRAFT


def test_formatting_is_deterministic(records, maps, options):
    family = _configurable(records, "red", "blue")
    assert format_family(family, maps, options).wire() == format_family(family, maps, options).wire()


def test_wire_shape_is_camel_case(records, maps, options):
    wire = format_family(_configurable(records, "red", "blue"), maps, options).wire()
    assert wire["descriptionHtml"] == "<p>Soft cotton tee</p>"
    assert wire["productType"] == "Apparel"
    assert wire["existingDestinationId"] is None
    assert wire["variants"][0]["optionValues"] == [{"optionName": "Color", "valueName": "Red"}]
    assert wire["variants"][0]["media"]["altText"] == "Acme Tee - Red"


def test_custom_namespace_and_empty_deny_list(records, maps):
    opts = SyncOptions(media_base_url=MEDIA_BASE, metafield_namespace="legacy", metafield_deny_list=())
    product = ProductFormatter(maps, opts).format(_configurable(records, "red", "blue"))
    assert "Short Description" in [m.key for m in product.metafields]
    assert {m.namespace for m in product.metafields} == {"legacy"}


def test_parentless_family_needs_one_child(records, maps, options):
    with pytest.raises(ValueError):
        format_family(Family(children=[records["red"], records["blue"]]), maps, options)


def test_children_sharing_a_name_get_distinct_image_keys(raw_records, maps, options):
    raw_records["blue"]["name"] = "Acme Tee - Red"
    family = Family(
        parent=MagentoProduct.model_validate(raw_records["parent"]),
        children=[MagentoProduct.model_validate(raw_records["red"]), MagentoProduct.model_validate(raw_records["blue"])],
    )
    product = format_family(family, maps, options)

    alts = [m.alt_text for m in product.media]
    assert alts == ["Acme Tee - Red (TEE-RED)", "Acme Tee - Red (TEE-BLUE)"]
    assert [v.media.alt_text for v in product.variants] == alts


def test_unique_child_names_stay_plain_image_keys(records, maps, options):
    product = format_family(_configurable(records, "red", "blue"), maps, options)
    assert [v.media.alt_text for v in product.variants] == ["Acme Tee - Red", "Acme Tee - Blue"]


def test_standalone_gallery_label_never_repeats_primary_key(raw_records, maps, options):
    raw_records["standalone"]["media_gallery_entries"][1]["label"] = "Solo Mug"
    product = format_family(Family(children=[MagentoProduct.model_validate(raw_records["standalone"])]), maps, options)

    alts = [m.alt_text for m in product.media]
    assert alts == ["Solo Mug", "Solo Mug (2)"]
    assert alts.count(product.variants[0].media.alt_text) == 1
