from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from medcompare.errors import RetrievalError


@dataclass(frozen=True, slots=True)
class Success:
    products: list[dict[str, Any]]
    total_found: int | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return True

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ok": True,
            "products": list(self.products),
            "productsCount": len(self.products),
        }
        if self.total_found is not None:
            payload["totalFound"] = self.total_found
        if self.message:
            payload["message"] = self.message
        return payload


@dataclass(frozen=True, slots=True)
class Failure:
    reason: str
    message: str

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Failure":
        reason = exc.reason if isinstance(exc, RetrievalError) else "internal"
        return cls(reason=reason, message=str(exc) or exc.__class__.__name__)

    def to_payload(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message, "reason": self.reason}


SourceResult = Union[Success, Failure]


@dataclass(slots=True)
class AggregateResponse:
    """Outcome of one orchestrated request, one entry per enabled source."""

    keyword: str
    results: dict[str, SourceResult] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def sources(self) -> set[str]:
        return set(self.results)

    def counts(self) -> dict[str, int]:
        return {
            source: len(result.products) if result.ok else 0
            for source, result in self.results.items()
        }

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": True}
        for source, result in self.results.items():
            payload[source] = result.to_payload()
        return payload
