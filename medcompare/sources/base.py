from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, ClassVar

from playwright.async_api import Browser, Page

from medcompare.config import settings
from medcompare.errors import RetrievalError
from medcompare.models.results import Failure, SourceResult, Success
from medcompare.services.logger import get_logger


class SourceAdapter(ABC):
    """Retrieves and normalizes products for one pharmacy site.

    Subclasses implement ``_fetch``. ``fetch`` is the boundary: whatever
    goes wrong inside is returned as a ``Failure``, never raised.
    """

    source_id: ClassVar[str] = "base"

    def __init__(self, max_products: int | None = None):
        self.max_products = settings.max_products if max_products is None else max_products
        self.logger = get_logger(f"sources.{self.source_id}")

    async def fetch(self, keyword: str, browser: Browser) -> SourceResult:
        try:
            return await self._fetch(keyword, browser)
        except RetrievalError as exc:
            self.logger.warning("%s: %s", self.source_id, exc)
            return Failure.from_exception(exc)
        except Exception as exc:
            self.logger.exception("%s: unexpected error", self.source_id)
            return Failure.from_exception(exc)

    @abstractmethod
    async def _fetch(self, keyword: str, browser: Browser) -> SourceResult:
        raise NotImplementedError

    def _success(
        self,
        products: list[dict[str, Any]],
        *,
        total_found: int | None = None,
        message: str | None = None,
    ) -> Success:
        return Success(
            products=products[: self.max_products],
            total_found=total_found,
            message=message,
        )

    @asynccontextmanager
    async def _page(self, browser: Browser) -> AsyncIterator[Page]:
        page = await browser.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as exc:
                self.logger.debug("%s: page close failed: %s", self.source_id, exc)
