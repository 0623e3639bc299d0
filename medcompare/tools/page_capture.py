from __future__ import annotations

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response

from medcompare.services.logger import get_logger

logger = get_logger("page_capture")


async def expect_document(
    page: Page,
    url: str,
    *,
    method: str = "GET",
    status: int = 200,
    wait_until: str = "domcontentloaded",
    timeout_ms: int = 20000,
) -> str | None:
    """Navigate to ``url`` and return the body of the response that matches it.

    The response predicate is registered before navigation starts and
    matches on method, exact URL and status, so other requests in flight on
    the same page cannot be mistaken for it. Navigation errors propagate;
    a missing or unreadable matching response returns ``None``.
    """

    def matches(response: Response) -> bool:
        return (
            response.url == url
            and response.request.method == method
            and response.status == status
        )

    navigated = False
    try:
        async with page.expect_response(matches, timeout=timeout_ms) as response_info:
            await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
            navigated = True
        response = await response_info.value
        return await response.text()
    except PlaywrightError as exc:
        if not navigated:
            raise
        logger.info("No matching %s %s response captured: %s", method, url, exc)
        return None
