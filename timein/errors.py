"""
Failures surfaced by Resolver.resolve().

Every kind carries a human-readable detail. None of them is retried: each
is bad input, a missing external fact, or a durability problem the caller
should see.
"""


class ResolveError(Exception):
    kind = "resolve_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class EmptyQueryError(ResolveError):
    kind = "empty_query"

    def __init__(self, detail: str = "City or landmark argument required."):
        super().__init__(detail)


class PlaceNotFoundError(ResolveError):
    kind = "place_not_found"


class TimezoneNotFoundError(ResolveError):
    kind = "timezone_not_found"


class FormatFailedError(ResolveError):
    kind = "format_failed"


class CacheWriteFailedError(ResolveError):
    kind = "cache_write_failed"
