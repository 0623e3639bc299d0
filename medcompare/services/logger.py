"""Centralized logging for the retrieval service."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from medcompare.config import settings

if TYPE_CHECKING:
    from medcompare.models.results import SourceResult

LOG_DIR = Path(settings.log_dir)
LOG_DIR.mkdir(exist_ok=True)

APP_LOG_LEVEL = getattr(logging, settings.app_log_level.upper(), logging.INFO)
NOISY_LOG_LEVEL = getattr(logging, settings.noisy_log_level.upper(), logging.WARNING)

logging.basicConfig(
    level=APP_LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(LOG_DIR / "medcompare.log"),
        logging.StreamHandler(),
    ],
)

for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "asyncio",
    "playwright",
):
    logging.getLogger(logger_name).setLevel(NOISY_LOG_LEVEL)

logger = logging.getLogger("medcompare")


def get_logger(area: str) -> logging.Logger:
    return logger.getChild(area)


def log_source_result(
    source: str,
    result: "SourceResult",
    duration_ms: int = 0,
) -> None:
    """Log the outcome of one source task."""
    data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "ok": result.ok,
        "duration_ms": duration_ms,
    }
    if result.ok:
        data["products"] = len(result.products)
        logger.info(f"SOURCE_RESULT: {json.dumps(data)}")
    else:
        data["reason"] = result.reason
        data["error"] = result.message
        logger.warning(f"SOURCE_RESULT: {json.dumps(data)}")


def log_event(
    event_type: str,
    message: str,
    **kwargs,
) -> None:
    """Log a generic event."""
    event_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "message": message,
        **kwargs,
    }
    logger.info(f"EVENT: {json.dumps(event_data, default=str)}")
