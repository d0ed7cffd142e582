"""
Alfred Script Filter output.

Alfred reads a JSON document with an "items" list from stdout. Failures are
rendered as non-actionable items (valid=false) whose icon tells "no input",
"not found" and "internal error" apart.
"""

import json

from timein.resolver import ResolveResult

from .ports import Failure, FailureKind, Presenter

_ICON_DIR = "/System/Library/CoreServices/CoreTypes.bundle/Contents/Resources"

ICONS: dict[str, str] = {
    "clock": "/System/Applications/Clock.app/Contents/Resources/AppIcon.icns",
    "no_input": f"{_ICON_DIR}/ToolbarInfo.icns",
    "not_found": f"{_ICON_DIR}/AlertCautionIcon.icns",
    "internal": f"{_ICON_DIR}/AlertStopIcon.icns",
}

TIME_CACHE_SECONDS = 60           # the displayed time goes stale quickly
TIMEZONE_CACHE_SECONDS = 604800   # 7 days; a place does not change zone


class AlfredPresenter(Presenter):

    def render_success(self, result: ResolveResult, timezone_only: bool = False) -> str:
        if timezone_only:
            subtitle = result.query
        else:
            subtitle = f"Current time in {result.query}"
            if result.abbreviation:
                subtitle += f" ({result.abbreviation})"
        if result.cached:
            subtitle += " (cached)"

        item = {
            "uid": result.timezone,
            "title": result.timezone if timezone_only else result.display,
            "subtitle": subtitle,
            "arg": result.timezone if timezone_only else result.display,
            "icon": {"path": ICONS["clock"]},
            "variables": {"timezone": result.timezone, "city": result.query},
        }
        seconds = TIMEZONE_CACHE_SECONDS if timezone_only else TIME_CACHE_SECONDS
        return self._document([item], cache_seconds=seconds)

    def render_failure(self, failure: Failure) -> str:
        item = {
            "title": failure.title,
            "subtitle": failure.detail,
            "valid": False,
            "icon": {"path": self._failure_icon(failure.kind)},
        }
        return self._document([item])

    @staticmethod
    def _failure_icon(kind: FailureKind) -> str:
        return ICONS.get(kind, ICONS["internal"])

    @staticmethod
    def _document(items: list[dict], cache_seconds: int | None = None) -> str:
        doc: dict = {"items": items}
        if cache_seconds is not None:
            doc["cache"] = {"seconds": cache_seconds}
        return json.dumps(doc, ensure_ascii=False)
