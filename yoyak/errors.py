from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification for error logging."""

    LANGUAGE = "language"
    MODEL = "model"
    CANCELLED = "cancelled"
    LIVENESS = "liveness"
    CONFIG = "config"


class YoyakError(Exception):
    """Base class for errors surfaced to callers of the engines."""

    category: ErrorCategory = ErrorCategory.MODEL


class InvalidLanguage(YoyakError, ValueError):
    """The language code is not a known ISO 639-1 code."""

    category = ErrorCategory.LANGUAGE

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"unknown ISO 639-1 language code: {code!r}")


class ModelInvocationFailed(YoyakError):
    """The model endpoint failed at the transport or API level."""

    category = ErrorCategory.MODEL


class Cancelled(YoyakError):
    """The caller cancelled the stream."""

    category = ErrorCategory.CANCELLED


class ContinuationLimitExceeded(YoyakError):
    """The model kept truncating past the configured continuation limit."""

    category = ErrorCategory.LIVENESS

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"translation still incomplete after {limit} continuation turn(s)"
        )


class ConfigurationError(YoyakError):
    """Settings are missing or invalid for the selected model."""

    category = ErrorCategory.CONFIG
