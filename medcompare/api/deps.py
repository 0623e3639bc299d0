from __future__ import annotations

from fastapi import Request

from medcompare.services.browser import BrowserManager
from medcompare.services.orchestrator import RetrievalOrchestrator


def get_browser_manager(request: Request) -> BrowserManager:
    """The service-wide browser manager created in the app lifespan."""
    manager = getattr(request.app.state, "browser_manager", None)
    if manager is None:
        manager = BrowserManager()
        request.app.state.browser_manager = manager
    return manager


def get_orchestrator(request: Request) -> RetrievalOrchestrator:
    return RetrievalOrchestrator(get_browser_manager(request))
