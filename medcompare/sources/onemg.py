from __future__ import annotations

import re
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Browser

from medcompare.models.results import SourceResult
from medcompare.sources.base import SourceAdapter
from medcompare.tools.web_utils import absolute_url, parse_price, text_of

BASE_URL = "https://www.1mg.com"
GRID_SELECTOR = ".style__grid-container___3OfcL"
CARD_SELECTOR = ".style__container___cTDz0"


def _image_url(card: Tag) -> str | None:
    image = card.select_one(".style__image___Ny-Sa")
    if image is None:
        return None
    srcset = (image.get("srcset") or "").split(",")[0].strip().split(" ")[0]
    return image.get("src") or image.get("data-src") or srcset or None


def parse_card(card: Tag) -> dict:
    link = card.select_one('a[href*="/drugs/"], a[href*="/otc/"]')

    selling_price = None
    mrp = None
    price_tag = card.select_one(".style__price-tag___B2csA")
    if price_tag is not None:
        price_text = price_tag.get_text(strip=True)
        if price_tag.select_one(".style__mrp-tag___1RMM3") is not None:
            mrp = parse_price(price_text)
        else:
            selling_price = parse_price(price_text)

    # A struck-through MRP is shown next to the discounted price.
    discounted_mrp = text_of(card, ".style__discount-price___cFNZn")
    if discounted_mrp:
        mrp = parse_price(discounted_mrp)

    delivery = text_of(card, ".style__delivery-date___cFNZn")
    delivery = re.sub(r"Get by|Get in", "", delivery).strip()

    return {
        "name": text_of(card, ".style__pro-title___3zxNC") or None,
        "pack_size": text_of(card, ".style__pack-size___254Cd") or None,
        "product_url": absolute_url(BASE_URL, link.get("href")) if link is not None else None,
        "image_url": _image_url(card),
        "selling_price": selling_price,
        "mrp": mrp,
        "discount": text_of(card, ".style__off-badge___21aDi") or None,
        "delivery_info": delivery or None,
        "rating": text_of(card, ".CardRatingDetail__ratings-container___2ZTSK") or None,
        "is_ad": card.select_one(".style__adBadge-label___1gTcr") is not None,
        "prescription_required": card.select_one(".style__rx-required___3q1Xp") is not None,
        "out_of_stock": card.select_one(".style__not-available___ADBvR") is not None,
    }


def parse_products(html: str) -> list[dict]:
    soup = BeautifulSoup(html, "html.parser")
    return [parse_card(card) for card in soup.select(CARD_SELECTOR)]


class OneMgAdapter(SourceAdapter):
    source_id = "onemg"
    navigation_timeout_ms = 15000
    grid_wait_ms = 3000

    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        url = f"{BASE_URL}/search/all?name={quote(keyword, safe='')}&filter=true&sort=relevance"
        async with self._page(browser) as page:
            await page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
            await page.wait_for_selector(GRID_SELECTOR, timeout=self.grid_wait_ms)
            html = await page.content()

        products = parse_products(html)
        organic = [product for product in products if not product["is_ad"]]
        self.logger.info(
            "1mg: extracted %d products (%d non-ads), returning top %d non-ad products",
            len(products),
            len(organic),
            self.max_products,
        )
        return self._success(organic, total_found=len(organic))
