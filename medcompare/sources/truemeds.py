from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlencode

from playwright.async_api import Browser

from medcompare.errors import UpstreamShapeError
from medcompare.models.results import SourceResult
from medcompare.sources.base import SourceAdapter
from medcompare.tools.web_utils import leading_number, slugify

SUGGESTION_URL = "https://nal.tmmumbai.in/CustomerService/getSearchSuggestion"
STOREFRONT_URL = "https://www.truemeds.in/otc"


def build_search_url(keyword: str) -> str:
    params = {
        "searchString": keyword,
        "isMultiSearch": "true",
        "elasticSearchType": "SEARCH_SUGGESTION",
        "warehouseId": "20",
        "variantId": "18",
        "searchVariant": "N",
        "signal": "[object AbortSignal]",
        "orderConfirmSrc": "WEBSITE",
        "sourceVersion": "TM_WEBSITE_V_4.4.1",
    }
    return f"{SUGGESTION_URL}?{urlencode(params)}"


def product_link(product: dict[str, Any]) -> str | None:
    """Storefront URL: slug of the SKU name (with its mg strength) plus product code."""
    code = str(product.get("productCode") or "").lower()
    name = str(product.get("skuName") or "")
    strength = re.search(r"(\d+)\s*mg", str(product.get("composition") or ""), re.IGNORECASE)
    if strength and not re.search(r"\bmg\b", name, re.IGNORECASE):
        number = strength.group(1)
        bare_number = re.compile(rf"\b{number}\b")
        if bare_number.search(name):
            name = bare_number.sub(f"{number} mg", name, count=1)
        else:
            name = f"{name} {number} mg"
    slug = slugify(name)
    if not slug or not code:
        return None
    return f"{STOREFRONT_URL}/{slug}-{code}"


def normalize_product(product: dict[str, Any]) -> dict[str, Any]:
    pack_size = leading_number(product.get("packSize")) or 1
    selling_price = product.get("sellingPrice")
    price_per_item = None
    if isinstance(selling_price, (int, float)) and pack_size > 0:
        price_per_item = round(selling_price / pack_size, 2)

    return {
        "productCode": product.get("productCode"),
        "skuName": product.get("skuName"),
        "manufacturerName": product.get("manufacturerName"),
        "mrp": product.get("mrp"),
        "sellingPrice": selling_price,
        "discount": product.get("discount"),
        "packSize": product.get("packSize"),
        "packForm": product.get("packForm"),
        "productImageUrl": product.get("productImageUrl"),
        "composition": product.get("composition"),
        "link": product_link(product),
        "pricePerItem": price_per_item,
    }


def extract_products(payload: Any) -> list[dict[str, Any]]:
    """The ``product`` objects from a search-suggestion payload."""
    response_data = payload.get("responseData") if isinstance(payload, dict) else None
    product_list = response_data.get("productList") if isinstance(response_data, dict) else None
    if not isinstance(product_list, list) or not product_list:
        raise UpstreamShapeError("No products found in response")
    products = [
        item["product"]
        for item in product_list
        if isinstance(item, dict) and isinstance(item.get("product"), dict)
    ]
    if not products:
        raise UpstreamShapeError("No product records in response")
    return products


class TruemedsAdapter(SourceAdapter):
    source_id = "truemeds"
    navigation_timeout_ms = 15000

    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        url = build_search_url(keyword)
        async with self._page(browser) as page:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
            if response is None or not response.ok:
                status = response.status if response is not None else "No response"
                raise UpstreamShapeError(f"Failed to fetch: {status}")
            payload = await response.json()

        found = extract_products(payload)
        products = [normalize_product(product) for product in found[: self.max_products]]
        self.logger.info("Truemeds: extracted %d products", len(products))
        return self._success(
            products,
            total_found=len(found),
            message="Truemeds data retrieved successfully",
        )
