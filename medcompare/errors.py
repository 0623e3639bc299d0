from __future__ import annotations


class RetrievalError(Exception):
    """Base for every error the retrieval pipeline knows how to classify."""

    reason: str = "internal"


class InputError(RetrievalError):
    """Missing or invalid request input. Fails the whole request."""

    reason = "input"


class ResourceError(RetrievalError):
    """The shared browser could not be launched."""

    reason = "resource"


class DeadlineExceeded(RetrievalError, TimeoutError):
    """A labelled operation did not finish within its deadline."""

    reason = "timeout"

    def __init__(self, label: str, seconds: float):
        self.label = label
        self.seconds = seconds
        super().__init__(f"{label} timed out after {int(seconds * 1000)}ms")


class ExtractionError(RetrievalError):
    """No balanced structured segment, or it did not parse."""

    reason = "extraction"


class UpstreamShapeError(RetrievalError):
    """An upstream response lacked the fields a source expects."""

    reason = "upstream_shape"


class PrescriptionReadError(Exception):
    """The image-to-text inference call failed."""
