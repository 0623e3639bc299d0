from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medcompare.api.deps import get_browser_manager
from medcompare.api.routes import browser, prescription, search
from medcompare.config import settings
from medcompare.services.browser import BrowserManager
from medcompare.services.logger import get_logger

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    manager = BrowserManager()
    app.state.browser_manager = manager
    if settings.prelaunch_browser:
        await manager.prelaunch()
    yield
    # Shutdown
    await manager.release()


app = FastAPI(
    title="medcompare",
    description="Compare medicine listings across pharmacy sites",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_origin_regex=settings.cors_origin_regex or None,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routes
app.include_router(search.router)
app.include_router(prescription.router)
app.include_router(browser.router)


@app.get("/api/health")
async def health(manager: BrowserManager = Depends(get_browser_manager)):
    return {"ok": True, "env": settings.environment, "browser": manager.state.value}
