from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable

from playwright.async_api import Browser, Playwright, async_playwright

from medcompare.config import settings
from medcompare.errors import ResourceError
from medcompare.services.logger import get_logger

logger = get_logger("browser")

Launcher = Callable[[], Awaitable[Browser]]


class BrowserState(str, Enum):
    UNSTARTED = "unstarted"
    LAUNCHING = "launching"
    READY = "ready"
    CLOSED = "closed"


class BrowserManager:
    """Owns the one Chromium instance every source adapter renders pages with.

    Concurrent ``acquire()`` calls made while the browser is launching all
    await the same launch task, so only one launch ever runs. A failed
    launch resets the manager so the next call can retry. A browser that
    has died is dropped and relaunched on the next acquire.

    Use as ``async with BrowserManager() as manager`` or call ``release()``
    from a shutdown hook.
    """

    def __init__(
        self,
        *,
        headless: bool | None = None,
        launch_args: list[str] | None = None,
        launcher: Launcher | None = None,
    ):
        self.headless = settings.headless if headless is None else headless
        self.launch_args = list(
            settings.browser_launch_args if launch_args is None else launch_args
        )
        self._launcher = launcher
        self._state = BrowserState.UNSTARTED
        self._browser: Browser | None = None
        self._playwright: Playwright | None = None
        self._launch_task: asyncio.Task | None = None
        self._release_lock = asyncio.Lock()
        self._cleanup_tasks: set[asyncio.Task] = set()
        self.launch_count = 0

    @property
    def state(self) -> BrowserState:
        return self._state

    async def __aenter__(self) -> "BrowserManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it if needed."""
        browser = self._browser
        if self._state is BrowserState.READY and browser is not None:
            if browser.is_connected():
                return browser
            logger.warning("Shared browser is no longer connected; relaunching")
            self._drop(browser)

        if self._launch_task is None:
            self._state = BrowserState.LAUNCHING
            self._launch_task = asyncio.create_task(self._launch(), name="browser-launch")

        # A waiter cancelled by its own deadline must not cancel the launch.
        return await asyncio.shield(self._launch_task)

    async def prelaunch(self) -> None:
        """Best-effort warm start; failures are only logged."""
        try:
            await self.acquire()
        except ResourceError as exc:
            logger.error("Failed to pre-launch browser: %s", exc)

    async def release(self) -> None:
        """Close the shared browser. Safe to call any number of times."""
        async with self._release_lock:
            task = self._launch_task
            if task is not None:
                try:
                    await asyncio.shield(task)
                except ResourceError:
                    pass

            browser, playwright = self._browser, self._playwright
            self._browser = None
            self._playwright = None
            already_closed = self._state is BrowserState.CLOSED
            self._state = BrowserState.CLOSED
            if already_closed and browser is None:
                return

            await self._close_quietly(browser, playwright)
            logger.info("Browser closed")

    async def _launch(self) -> Browser:
        logger.info("Launching browser (headless=%s)...", self.headless)
        self.launch_count += 1
        try:
            browser = await (self._launcher or self._launch_default)()
        except Exception as exc:
            self._state = BrowserState.UNSTARTED
            logger.error("Browser launch failed: %s", exc)
            raise ResourceError(f"Failed to launch browser: {exc}") from exc
        finally:
            self._launch_task = None

        self._browser = browser
        self._state = BrowserState.READY
        browser.on("disconnected", self._on_disconnected)
        logger.info("Browser launched successfully")
        return browser

    async def _launch_default(self) -> Browser:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.headless,
                args=self.launch_args,
            )
        except Exception:
            await playwright.stop()
            raise
        self._playwright = playwright
        return browser

    def _on_disconnected(self, browser: Any) -> None:
        if browser is self._browser:
            logger.warning("Shared browser disconnected")
            self._drop(browser)

    def _drop(self, browser: Browser) -> None:
        """Forget a dead browser and tear it down in the background."""
        playwright = self._playwright
        self._browser = None
        self._playwright = None
        self._state = BrowserState.UNSTARTED
        task = asyncio.get_running_loop().create_task(
            self._close_quietly(browser, playwright)
        )
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

    @staticmethod
    async def _close_quietly(browser: Browser | None, playwright: Playwright | None) -> None:
        if browser is not None:
            try:
                await browser.close()
            except Exception as exc:
                logger.warning("Failed to close browser: %s", exc)
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as exc:
                logger.warning("Failed to stop playwright driver: %s", exc)
