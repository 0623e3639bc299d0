from __future__ import annotations

from urllib.parse import quote

from bs4 import BeautifulSoup
from playwright.async_api import Browser
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from medcompare.errors import UpstreamShapeError
from medcompare.models.results import SourceResult
from medcompare.sources.base import SourceAdapter
from medcompare.tools.web_utils import parse_price, text_of

BASE_URL = "https://pharmeasy.in"
MENU_ITEM_SELECTOR = '[role="menuitem"]'


def parse_menu_items(html: str) -> list[dict] | None:
    """Products from the search page's menuitem cards.

    Returns None when the page has no menuitems at all.
    """
    soup = BeautifulSoup(html, "html.parser")
    items = soup.select(MENU_ITEM_SELECTOR)
    if not items:
        return None

    products: list[dict] = []
    for item in items:
        data_id = item.get("data-id")
        if data_id == "0":
            continue

        link = item.select_one("a")
        href = link.get("href") if link is not None else None
        name = text_of(item, ".ProductCard_medicineName__Uzjm7")
        if not name or not href:
            continue

        image = item.select_one("img.ProductCard_productImage__LUmca")
        image_url = None
        if image is not None:
            image_url = image.get("src") or (image.get("srcset") or "").split(" ")[0] or None

        discount = text_of(item, ".ProductCard_gcdDiscountPercent__Dl0UK").replace("% OFF", "").strip()
        products.append(
            {
                "dataId": data_id,
                "name": name,
                "brand": text_of(item, ".ProductCard_brandName__p8vDS").replace("By ", "") or None,
                "unit": text_of(item, ".ProductCard_measurementUnit__utxiv") or None,
                "price": parse_price(text_of(item, ".ProductCard_ourPrice__yU5GB")),
                "originalPrice": parse_price(
                    text_of(item, ".ProductCard_originalMrp__9osyn .ProductCard_striked__OoYd9")
                ),
                "discount": discount or None,
                "image": image_url,
                "url": f"{BASE_URL}{href}",
            }
        )
    return products


class PharmEasyAdapter(SourceAdapter):
    source_id = "pharmeasy"
    navigation_timeout_ms = 20000
    menu_wait_ms = 5000

    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        url = f"{BASE_URL}/search/all?name={quote(keyword, safe='')}"
        async with self._page(browser) as page:
            await page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
            try:
                await page.wait_for_selector(MENU_ITEM_SELECTOR, timeout=self.menu_wait_ms)
            except PlaywrightTimeoutError:
                self.logger.debug("PharmEasy: menuitems did not appear in time")
            html = await page.content()

        products = parse_menu_items(html)
        if products is None:
            raise UpstreamShapeError("Failed to extract menu items")
        return self._success(products, total_found=len(products))
