"""Exception hierarchy for ctxindex."""

from __future__ import annotations


class CtxIndexError(RuntimeError):
    """Base class for errors raised by ctxindex."""


class ConfigError(CtxIndexError):
    """Raised when the configuration file cannot be parsed."""


class FetchError(CtxIndexError):
    """Raised by the hosting client when a remote call does not succeed."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class NotFoundError(FetchError):
    """Expected absence of a remote resource (HTTP 404)."""


class TransientFetchError(FetchError):
    """Non-404 HTTP failure or network exception."""


class MalformedInputError(CtxIndexError):
    """Raised when fetched content cannot be parsed into the expected shape."""


__all__ = [
    "ConfigError",
    "CtxIndexError",
    "FetchError",
    "MalformedInputError",
    "NotFoundError",
    "TransientFetchError",
]
