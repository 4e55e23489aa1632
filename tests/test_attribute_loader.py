import asyncio

import pytest

from catalog_sync.errors import MetadataError
from catalog_sync.magento.attribute_loader import build_attribute_maps, load_attribute_maps


def test_maps_resolve_id_code_and_options(maps):
    assert maps.label_for_id(93) == "Color"
    assert maps.label_for_id("93") == "Color"
    assert maps.label_for_code("color") == "Color"
    assert maps.code_for_label("Color") == "color"
    assert maps.option_label("color", 10) == "Red"
    assert maps.option_label("color", "11") == "Blue"
    assert maps.option_label("brand", "5") == "Acme"


def test_blank_options_are_excluded(maps):
    values = [o.value for o in maps.options_for("color")]
    assert values == ["10", "11"]
    assert maps.option_label("color", "") is None


def test_missing_label_falls_back_to_code(maps):
    assert maps.label_for_id(99) == "no_label_attr"
    assert maps.label_for_code("no_label_attr") == "no_label_attr"


def test_unknown_lookups_return_none(maps):
    assert maps.label_for_id(12345) is None
    assert maps.code_for_label("Flavor") is None
    assert maps.option_label("color", "999") is None
    assert maps.option_label(None, "10") is None
    assert maps.options_for("description") == []


def test_reverse_lookup_first_code_wins():
    maps = build_attribute_maps([
        {"attribute_id": 1, "attribute_code": "color", "default_frontend_label": "Color"},
        {"attribute_id": 2, "attribute_code": "colour", "default_frontend_label": "Color"},
    ])
    assert maps.code_for_label("Color") == "color"


def test_bare_list_and_empty_listing_are_accepted():
    assert build_attribute_maps([]).code_to_label == {}
    assert build_attribute_maps({"items": None}).code_to_label == {}


@pytest.mark.parametrize("listing", [
    {"items": [{"attribute_code": "color"}]},
    {"items": [{"attribute_id": 5}]},
    {"items": ["color"]},
    {"items": "color"},
])
def test_malformed_listing_raises_metadata_error(listing):
    with pytest.raises(MetadataError):
        build_attribute_maps(listing)


def test_load_attribute_maps_uses_client(attribute_listing):
    class Client:
        async def fetch_attribute_schema(self):
            return attribute_listing

    maps = asyncio.run(load_attribute_maps(Client()))
    assert maps.code_for_label("Size") == "size"
