import copy
import itertools

import pytest

from catalog_sync.config import SyncOptions
from catalog_sync.magento.attribute_loader import build_attribute_maps
from catalog_sync.magento.models import MagentoProduct
from catalog_sync.shopify.models import DestinationProductRef

MEDIA_BASE = "https://media.example.com/catalog/product"

ATTRIBUTE_LISTING = {
    "items": [
        {
            "attribute_id": 93,
            "attribute_code": "color",
            "default_frontend_label": "Color",
            "frontend_input": "select",
            "options": [
                {"label": " ", "value": ""},
                {"label": "Red", "value": "10"},
                {"label": "Blue", "value": "11"},
            ],
        },
        {
            "attribute_id": 142,
            "attribute_code": "size",
            "default_frontend_label": "Size",
            "frontend_input": "select",
            "options": [
                {"label": "Small", "value": "20"},
                {"label": "Medium", "value": "21"},
            ],
        },
        {
            "attribute_id": 81,
            "attribute_code": "brand",
            "default_frontend_label": "Brand",
            "frontend_input": "select",
            "options": [{"label": "Acme", "value": 5}],
        },
        {"attribute_id": 83, "attribute_code": "manufacturer", "default_frontend_label": "Manufacturer"},
        {"attribute_id": 75, "attribute_code": "description", "default_frontend_label": "Description"},
        {"attribute_id": 76, "attribute_code": "short_description", "default_frontend_label": "Short Description"},
        {"attribute_id": 150, "attribute_code": "product_type", "default_frontend_label": "Product Type"},
        {"attribute_id": 44, "attribute_code": "category_ids", "default_frontend_label": "Categories"},
        {"attribute_id": 99, "attribute_code": "no_label_attr", "default_frontend_label": None},
    ]
}


def _attrs(**values):
    return [{"attribute_code": k, "value": v} for k, v in values.items()]


PARENT = {
    "id": 100,
    "sku": "TEE",
    "name": "Acme Tee",
    "price": 0,
    "status": 1,
    "type_id": "configurable",
    "custom_attributes": _attrs(
        brand="5",
        description="<p>Soft cotton tee</p>",
        short_description="Soft",
        category_ids=["3", "4", "3"],
        product_type="Apparel",
    ),
    "media_gallery_entries": [],
    "extension_attributes": {
        "configurable_product_options": [
            {"id": 1, "attribute_id": "93", "label": "Color", "position": 0,
             "values": [{"value_index": 10}, {"value_index": 11}]},
        ],
        "configurable_product_links": [101, 102],
    },
}

CHILD_RED = {
    "id": 101,
    "sku": "TEE-RED",
    "name": "Acme Tee - Red",
    "price": 20,
    "status": 1,
    "type_id": "simple",
    "custom_attributes": _attrs(color="10", size="20"),
    "media_gallery_entries": [{"id": 1, "file": "/t/e/tee-red.jpg", "label": "front", "disabled": False}],
}

CHILD_BLUE = {
    "id": 102,
    "sku": "TEE-BLUE",
    "name": "Acme Tee - Blue",
    "price": 20.5,
    "status": 1,
    "type_id": "simple",
    "custom_attributes": _attrs(color="11", size="20"),
    "media_gallery_entries": [{"id": 2, "file": "/t/e/tee-blue.jpg", "label": "front", "disabled": False}],
}

STANDALONE = {
    "id": 200,
    "sku": "MUG",
    "name": "Solo Mug",
    "price": 9.99,
    "status": 1,
    "type_id": "simple",
    "custom_attributes": _attrs(manufacturer="Mugs Inc", description="<p>Mug</p>", category_ids=["7"]),
    "media_gallery_entries": [
        {"id": 3, "file": "/m/u/mug.jpg", "label": "main", "disabled": False},
        {"id": 4, "file": "/m/u/mug-side.jpg", "label": "side", "disabled": False},
        {"id": 5, "file": "/m/u/mug-old.jpg", "label": "old", "disabled": True},
    ],
}


@pytest.fixture
def attribute_listing():
    return copy.deepcopy(ATTRIBUTE_LISTING)


@pytest.fixture
def maps(attribute_listing):
    return build_attribute_maps(attribute_listing)


@pytest.fixture
def options():
    return SyncOptions(media_base_url=MEDIA_BASE)


@pytest.fixture
def raw_records():
    return copy.deepcopy({"parent": PARENT, "red": CHILD_RED, "blue": CHILD_BLUE, "standalone": STANDALONE})


@pytest.fixture
def records(raw_records):
    return {k: MagentoProduct.model_validate(v) for k, v in raw_records.items()}


class FakeShopify:
    """
    In-memory stand-in for ShopifyClient. Answers every mutation from its variables;
    `overrides` maps a root field (e.g. "productCreate") to a payload, a callable
    taking the variables, or an exception to raise.
    """

    def __init__(self, existing=None, overrides=None):
        self.existing = dict(existing or {})
        self.overrides = dict(overrides or {})
        self.calls = []
        self._ids = itertools.count(1)

    @staticmethod
    def _operation(query):
        for name in (
            "productCreateMedia(",
            "productVariantsBulkUpdate(",
            "productVariantsBulkCreate(",
            "productCreate(",
        ):
            if name in query:
                return name[:-1]
        raise AssertionError(f"unexpected GraphQL document: {query[:60]}")

    def calls_to(self, operation):
        return [variables for op, variables in self.calls if op == operation]

    async def execute(self, query, variables=None):
        op = self._operation(query)
        variables = variables or {}
        self.calls.append((op, variables))
        if op in self.overrides:
            answer = self.overrides[op]
            if isinstance(answer, Exception):
                raise answer
            payload = answer(variables) if callable(answer) else answer
            return {op: payload}
        return {op: getattr(self, "_" + op)(variables)}

    def _media_nodes(self, media):
        return [{"id": f"gid://shopify/MediaImage/{next(self._ids)}", "alt": m["alt"]} for m in media or []]

    def _productCreate(self, variables):
        product = variables["input"]
        selected = [
            {"name": o["name"], "value": o["values"][0]["name"]} for o in product["productOptions"]
        ] or [{"name": "Title", "value": "Default Title"}]
        return {
            "product": {
                "id": f"gid://shopify/Product/{next(self._ids)}",
                "title": product["title"],
                "variants": {"nodes": [{"id": "gid://shopify/ProductVariant/1", "title": "default", "selectedOptions": selected}]},
                "media": {"nodes": self._media_nodes(variables.get("media"))},
            },
            "userErrors": [],
        }

    def _productCreateMedia(self, variables):
        return {"media": self._media_nodes(variables["media"]), "mediaUserErrors": [], "product": {"id": variables["productId"]}}

    def _productVariantsBulkUpdate(self, variables):
        return {
            "product": {"id": variables["productId"]},
            "productVariants": [{"id": v["id"], "sku": v["inventoryItem"]["sku"]} for v in variables["variants"]],
            "userErrors": [],
        }

    def _productVariantsBulkCreate(self, variables):
        return {
            "productVariants": [
                {"id": f"gid://shopify/ProductVariant/{next(self._ids)}", "sku": v["inventoryItem"]["sku"]}
                for v in variables["variants"]
            ],
            "userErrors": [],
        }

    async def find_existing_product(self, title):
        self.calls.append(("find", {"title": title}))
        if title in self.existing:
            return DestinationProductRef(id=self.existing[title], title=title)
        return None


class FakeMagento:
    def __init__(self, listing, products, candidates):
        self.listing = listing
        self.products = products
        self.candidates = candidates
        self.windows = []
        self.fragments = []

    async def fetch_attribute_schema(self):
        return self.listing

    async def fetch_source_products(self, from_date, to_date):
        self.windows.append((from_date, to_date))
        return self.products

    async def fetch_configurable_candidates(self, fragments):
        self.fragments.append(list(fragments))
        return self.candidates
