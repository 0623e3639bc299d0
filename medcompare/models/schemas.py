from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# --- Requests ---


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keyword: str | None = None
    enabled_scrapers: dict[str, bool] | None = Field(default=None, alias="enabledScrapers")
    timeouts_ms: dict[str, int] | None = Field(default=None, alias="timeouts")

    def timeout_seconds(self) -> dict[str, float] | None:
        if not self.timeouts_ms:
            return None
        return {source: ms / 1000.0 for source, ms in self.timeouts_ms.items()}


class SourceSearchRequest(BaseModel):
    keyword: str | None = None


class PrescriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str | None = Field(default=None, alias="imageBase64")
    mime_type: str | None = Field(default=None, alias="mimeType")


# --- Responses ---


class PrescriptionResponse(BaseModel):
    success: bool
    medicines: list[str]


class BrowserStatusResponse(BaseModel):
    browser: str
