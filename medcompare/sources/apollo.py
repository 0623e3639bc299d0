from __future__ import annotations

from urllib.parse import quote

from bs4 import BeautifulSoup
from playwright.async_api import Browser

from medcompare.errors import UpstreamShapeError
from medcompare.models.results import SourceResult
from medcompare.sources.base import SourceAdapter
from medcompare.tools.web_utils import absolute_url, text_of

BASE_URL = "https://www.apollopharmacy.in"
CARD_SELECTOR = (
    '[data-qa="product-card"], .ProductCard_productCard, '
    '[class*="ProductCard"], [class*="product-card"]'
)
NAME_SELECTOR = (
    '[data-qa="medicine_name"], [class*="medicineName"], '
    '[class*="product-name"], h2, .name'
)
PRICE_SELECTOR = '[data-qa="price"], [class*="price"], .price'


def parse_products(html: str) -> list[dict]:
    """Product cards from a rendered Apollo search page."""
    soup = BeautifulSoup(html, "html.parser")
    cards = soup.select(CARD_SELECTOR)
    selected = {id(card) for card in cards}

    products: list[dict] = []
    for card in cards:
        # Class-substring selectors also match pieces of a card.
        if any(id(parent) in selected for parent in card.parents):
            continue
        name = text_of(card, NAME_SELECTOR)
        if not name:
            continue
        image = card.select_one("img")
        link = card.select_one("a")
        products.append(
            {
                "name": name,
                "price": text_of(card, PRICE_SELECTOR) or None,
                "image": image.get("src") if image is not None else None,
                "url": absolute_url(BASE_URL, link.get("href")) if link is not None else None,
            }
        )
    return products


class ApolloAdapter(SourceAdapter):
    source_id = "apollo"
    navigation_timeout_ms = 45000
    settle_ms = 5000

    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        url = f"{BASE_URL}/search-medicines/{quote(keyword, safe='')}"
        async with self._page(browser) as page:
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
            await page.wait_for_timeout(self.settle_ms)
            html = await page.content()

        products = parse_products(html)
        if not products:
            raise UpstreamShapeError("Apollo: no product cards found on search page")
        self.logger.info("Apollo: extracted %d products from DOM", len(products))
        return self._success(products, total_found=len(products))
