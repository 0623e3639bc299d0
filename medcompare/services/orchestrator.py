from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping

from medcompare.config import settings
from medcompare.errors import InputError, RetrievalError
from medcompare.models.results import AggregateResponse, Failure, SourceResult
from medcompare.services import logger as log_service
from medcompare.services.browser import BrowserManager
from medcompare.services.deadline import with_deadline
from medcompare.sources.base import SourceAdapter
from medcompare.sources.registry import build_adapters

logger = log_service.get_logger("orchestrator")


def normalize_keyword(keyword: Any) -> str:
    if not isinstance(keyword, str) or not keyword.strip():
        raise InputError("Keyword must be a non-empty string")
    return keyword.strip()


class RetrievalOrchestrator:
    """Fans one keyword out to every enabled source and fans the results back in.

    Flow:
      1. Validate the keyword (the only request-fatal check)
      2. Start one task per enabled source, all at once
      3. Each task acquires the shared browser and runs its adapter,
         bounded by that source's own deadline
      4. Collect a result for every enabled source, success or failure

    A failing or hanging source only ever produces its own ``Failure``.
    """

    def __init__(
        self,
        browser_manager: BrowserManager,
        *,
        adapters: Mapping[str, SourceAdapter] | None = None,
        timeouts: Mapping[str, float] | None = None,
    ):
        self.browser_manager = browser_manager
        self.adapters = dict(adapters) if adapters is not None else build_adapters()
        self.timeouts = dict(settings.source_timeouts)
        if timeouts:
            self.timeouts.update(timeouts)

    @property
    def source_ids(self) -> list[str]:
        return list(self.adapters)

    def resolve_enabled(self, enabled: Mapping[str, bool] | None) -> list[str]:
        """Enabled source ids; sources missing from ``enabled`` default to on."""
        enabled = dict(enabled or {})
        unknown = sorted(set(enabled) - set(self.adapters))
        if unknown:
            raise InputError(f"Unknown source(s): {', '.join(unknown)}")
        return [source for source in self.adapters if enabled.get(source, True)]

    def timeout_for(self, source: str, overrides: Mapping[str, float] | None = None) -> float:
        if overrides and source in overrides:
            return float(overrides[source])
        return float(self.timeouts.get(source, max(self.timeouts.values(), default=30.0)))

    async def run(
        self,
        keyword: Any,
        enabled: Mapping[str, bool] | None = None,
        timeouts: Mapping[str, float] | None = None,
    ) -> AggregateResponse:
        """Run every enabled source concurrently; one result per enabled source.

        ``timeouts`` are request-scoped per-source overrides in seconds.
        """
        kw = normalize_keyword(keyword)
        sources = self.resolve_enabled(enabled)
        log_service.log_event(
            event_type="search_started",
            message="Running sources concurrently",
            keyword=kw,
            sources=sources,
        )

        started = time.monotonic()
        raw_results = await asyncio.gather(
            *(self._run_task(source, kw, self.timeout_for(source, timeouts)) for source in sources),
            return_exceptions=True,
        )

        response = AggregateResponse(keyword=kw)
        for source, item in zip(sources, raw_results):
            if isinstance(item, BaseException):
                logger.error("%s task escaped its boundary: %r", source, item)
                item = Failure.from_exception(item)
            response.results[source] = item
        response.duration_ms = int((time.monotonic() - started) * 1000)

        log_service.log_event(
            event_type="search_completed",
            message="Summary counts",
            keyword=kw,
            counts=response.counts(),
            duration_ms=response.duration_ms,
        )
        return response

    async def run_source(
        self,
        source: str,
        keyword: Any,
        timeout: float | None = None,
    ) -> SourceResult:
        """Run a single source through the same acquire-and-deadline path."""
        kw = normalize_keyword(keyword)
        if source not in self.adapters:
            raise InputError(f"Unknown source: {source}")
        seconds = self.timeout_for(source) if timeout is None else float(timeout)
        return await self._run_task(source, kw, seconds)

    async def _run_task(self, source: str, keyword: str, seconds: float) -> SourceResult:
        started = time.monotonic()
        try:
            result = await with_deadline(
                self._acquire_and_fetch(source, keyword),
                seconds,
                label=source,
            )
        except RetrievalError as exc:
            result = Failure.from_exception(exc)
        except Exception as exc:
            logger.exception("%s: adapter raised past its boundary", source)
            result = Failure.from_exception(exc)

        log_service.log_source_result(
            source,
            result,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    async def _acquire_and_fetch(self, source: str, keyword: str) -> SourceResult:
        browser = await self.browser_manager.acquire()
        return await self.adapters[source].fetch(keyword, browser)
