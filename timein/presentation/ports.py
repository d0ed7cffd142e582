"""
Presenter port: how a resolution outcome is shown to the user.

Presenters never decide exit status or output stream; the CLI does.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from timein.errors import (
    CacheWriteFailedError,
    EmptyQueryError,
    FormatFailedError,
    PlaceNotFoundError,
    ResolveError,
    TimezoneNotFoundError,
)
from timein.resolver import ResolveResult

FailureKind = Literal[
    "no_input",   # nothing to look up
    "not_found",  # the place or its timezone is unknown
    "internal",   # formatting, cache or transport failure
]


@dataclass
class Failure:
    kind: FailureKind
    title: str
    detail: str


_FAILURES: list[tuple[type[ResolveError], FailureKind, str]] = [
    (EmptyQueryError, "no_input", "Enter a city name"),
    (PlaceNotFoundError, "not_found", "City not found"),
    (TimezoneNotFoundError, "not_found", "Timezone not found"),
    (FormatFailedError, "internal", "Could not format time"),
    (CacheWriteFailedError, "internal", "Could not save to cache"),
]


def failure_from_error(exc: BaseException) -> Failure:
    """Map any exception raised while resolving to a user-facing Failure."""
    for error_type, kind, title in _FAILURES:
        if isinstance(exc, error_type):
            detail = exc.detail
            if kind == "no_input":
                detail = "Example: timein Bangkok"
            return Failure(kind=kind, title=title, detail=detail)
    return Failure(kind="internal", title="Internal error", detail=str(exc) or type(exc).__name__)


class Presenter(ABC):

    @abstractmethod
    def render_success(self, result: ResolveResult, timezone_only: bool = False) -> str:
        """Text for a successful resolution."""
        ...

    @abstractmethod
    def render_failure(self, failure: Failure) -> str:
        """Text for a failed resolution."""
        ...
