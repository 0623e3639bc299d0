from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

from playwright.async_api import Browser
from playwright.async_api import Error as PlaywrightError

from medcompare.errors import ExtractionError, UpstreamShapeError
from medcompare.models.results import SourceResult
from medcompare.sources.base import SourceAdapter
from medcompare.tools.document_scanner import extract_json_segment
from medcompare.tools.page_capture import expect_document
from medcompare.tools.web_utils import clean_content, leading_number

BASE_URL = "https://www.netmeds.com"
ITEMS_MARKER = re.compile(r'"items"\s*:\s*\[')

IMPORTANT_FIELDS = (
    "name",
    "slug",
    "uid",
    "item_code",
    "brand_name",
    "price",
    "discount",
    "available_sizes",
    "categories",
    "is_active",
    "sellable",
    "rating",
    "description",
    "country_of_origin",
    "tags",
    "medias",
    "url",
)

ATTRIBUTE_FIELDS = {
    "genericname": "generic_name",
    "genericnamewithdosage": "generic_with_dosage",
    "ingredients": "ingredients",
    "marketername": "marketer",
    "manufacturername": "manufacturer",
    "dosage": "dosage",
    "dosageunit": "dosage_unit",
    "packsize": "pack_size",
    "packsizeunit": "pack_size_unit",
    "itemtype": "item_type",
    "mrp": "mrp",
    "schedule": "schedule",
}


def clean_medicine(item: dict[str, Any]) -> dict[str, Any]:
    """Reduce one raw Netmeds catalogue item to the fields clients use."""
    cleaned = {field: item[field] for field in IMPORTANT_FIELDS if field in item}

    if isinstance(item.get("url"), str):
        cleaned["product_url"] = f"{BASE_URL}{item['url']}"

    attributes = item.get("attributes")
    if isinstance(attributes, dict):
        info = {
            new_key: attributes[old_key]
            for old_key, new_key in ATTRIBUTE_FIELDS.items()
            if attributes.get(old_key) not in (None, "")
        }
        if info:
            cleaned["medicine_info"] = info

    if isinstance(cleaned.get("description"), str):
        cleaned["description"] = clean_content(cleaned["description"], max_length=500)

    medias = cleaned.pop("medias", None)
    if isinstance(medias, list) and medias and isinstance(medias[0], dict):
        cleaned["image_url"] = medias[0].get("url")
    elif medias is not None:
        cleaned["medias"] = medias

    categories = cleaned.pop("categories", None)
    if isinstance(categories, list):
        cleaned["category_names"] = [
            cat.get("name") for cat in categories if isinstance(cat, dict)
        ]
    elif categories is not None:
        cleaned["categories"] = categories

    price = cleaned.get("price")
    if isinstance(price, dict) and isinstance(price.get("effective"), dict):
        effective = price["effective"]
        marked = price.get("marked")
        cleaned["selling_price"] = effective.get("min")
        cleaned["marked_price"] = marked.get("min") if isinstance(marked, dict) else None
        cleaned["currency"] = effective.get("currency_code")
        del cleaned["price"]

    selling_price = cleaned.get("selling_price")
    info = cleaned.get("medicine_info") or {}
    if selling_price and "pack_size" in info:
        units = int(leading_number(info["pack_size"]) or 0)
        if units > 0:
            cleaned["price_per_unit"] = selling_price / units

    return cleaned


def clean_medicine_data(items: list[Any]) -> list[dict[str, Any]]:
    records = [item for item in items if isinstance(item, dict)]
    if items and not records:
        raise UpstreamShapeError("Netmeds items array holds no product records")
    return [clean_medicine(item) for item in records]


class NetmedsAdapter(SourceAdapter):
    source_id = "netmeds"
    navigation_timeout_ms = 20000

    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        url = f"{BASE_URL}/products?q={quote(keyword, safe='')}&sort_on=relevance"
        async with self._page(browser) as page:
            html = await expect_document(page, url, timeout_ms=self.navigation_timeout_ms)
            if not html:
                # Network capture missed; fall back to the rendered document.
                try:
                    html = await page.content()
                except PlaywrightError as exc:
                    self.logger.debug("Netmeds: page content unavailable: %s", exc)

        if not html:
            raise UpstreamShapeError("Failed to capture HTML response")

        items = extract_json_segment(html, ITEMS_MARKER)
        if not isinstance(items, list):
            raise ExtractionError("Netmeds items segment is not an array")

        self.logger.info("Netmeds: cleaning medicine data...")
        cleaned = clean_medicine_data(items)
        self.logger.info("Netmeds: extracted %d products, returning top %d", len(cleaned), self.max_products)
        return self._success(
            cleaned,
            total_found=len(cleaned),
            message=f"Netmeds: Found {len(cleaned)} products",
        )
