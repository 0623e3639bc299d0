from __future__ import annotations

import json
import re
from typing import Any

import httpx

from medcompare.config import settings
from medcompare.errors import PrescriptionReadError
from medcompare.services.logger import get_logger

logger = get_logger("prescription")

PROMPT = (
    "You are an OCR assistant for medical prescriptions. From the following "
    "prescription image, extract ONLY the distinct medicine names. \n"
    "Do NOT include dosage, frequency, instructions, patient name, or doctor name.\n"
    'Return the result as a JSON array of strings, like: ["Paracetamol","Azithromycin"]\n'
    "If no medicines can be confidently extracted, return an empty array [] and nothing else."
)

_DATA_URL_PREFIX = re.compile(r"^data:[^;]+;base64,")
_CODE_FENCE = re.compile(r"```json\s*", re.IGNORECASE)
_EDGE_QUOTES = re.compile(r"^[\"'\s]+|[\"'\s]+$")
_EDGE_ARTIFACTS = re.compile(r"^[\"'\[\]]+|[\"'\[\]]+$")
MAX_FALLBACK_NAMES = 20


def strip_data_url(image_base64: str) -> str:
    return _DATA_URL_PREFIX.sub("", image_base64)


def parse_medicine_names(text: str) -> list[str]:
    """Medicine names from model output, tolerant of fences and loose lists."""
    if not text:
        return []
    clean = _CODE_FENCE.sub("", text).replace("```", "").strip()

    names: list[str]
    try:
        parsed = json.loads(clean)
        names = [s.strip() for s in parsed if isinstance(s, str)] if isinstance(parsed, list) else []
    except json.JSONDecodeError:
        stripped = re.sub(r"^\[|\]$", "", clean)
        names = [
            token
            for token in (_EDGE_QUOTES.sub("", part).strip() for part in re.split(r"[,\n]", stripped))
            if token and re.search(r"[a-zA-Z]", token) and len(token) > 1
        ][:MAX_FALLBACK_NAMES]

    deduped: list[str] = []
    for name in names:
        name = _EDGE_ARTIFACTS.sub("", name).strip()
        if name and name not in deduped:
            deduped.append(name)
    return deduped


def _response_text(data: Any) -> str:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


async def read_prescription(image_base64: str, mime_type: str | None = None) -> list[str]:
    """Send a prescription image to Gemini and return the medicine names it lists."""
    if not settings.gemini_api_key:
        raise PrescriptionReadError("Gemini API key not configured")

    endpoint = f"{settings.gemini_base_url.rstrip('/')}/models/{settings.gemini_model}:generateContent"
    payload = {
        "contents": [
            {
                "parts": [
                    {"text": PROMPT},
                    {
                        "inlineData": {
                            "mimeType": mime_type or "image/png",
                            "data": strip_data_url(image_base64),
                        }
                    },
                ]
            }
        ]
    }

    try:
        async with httpx.AsyncClient(timeout=settings.gemini_timeout_seconds) as client:
            response = await client.post(
                endpoint,
                params={"key": settings.gemini_api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Gemini OCR error: %s", exc)
        raise PrescriptionReadError("Failed to process image") from exc

    return parse_medicine_names(_response_text(data))
