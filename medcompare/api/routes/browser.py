from __future__ import annotations

from fastapi import APIRouter, Depends

from medcompare.api.deps import get_browser_manager
from medcompare.models.schemas import BrowserStatusResponse
from medcompare.services.browser import BrowserManager

router = APIRouter(prefix="/api/browser", tags=["browser"])


@router.get("", response_model=BrowserStatusResponse)
async def browser_status(manager: BrowserManager = Depends(get_browser_manager)):
    return BrowserStatusResponse(browser=manager.state.value)


@router.post("/release", response_model=BrowserStatusResponse)
async def release_browser(manager: BrowserManager = Depends(get_browser_manager)):
    """Administrative teardown of the shared browser; the next search relaunches it."""
    await manager.release()
    return BrowserStatusResponse(browser=manager.state.value)
