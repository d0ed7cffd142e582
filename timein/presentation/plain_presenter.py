from timein.resolver import ResolveResult

from .ports import Failure, Presenter


class PlainPresenter(Presenter):
    """Adapter: one human-readable line. For terminals and shell pipelines."""

    def render_success(self, result: ResolveResult, timezone_only: bool = False) -> str:
        if timezone_only:
            return f"{result.timezone}\n"
        return f"{result.display}\n"

    def render_failure(self, failure: Failure) -> str:
        return f"Error: {failure.title}: {failure.detail}\n"
