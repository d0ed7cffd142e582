import os

from .ports import Presenter


def create_presenter(output_format: str | None = None) -> Presenter:
    """
    Pick the output style: an explicit `output_format` wins, then
    TIMEIN_FORMAT, then "plain". Alfred workflows set TIMEIN_FORMAT=alfred
    once instead of passing --format on every call.
    """
    output_format = output_format or os.environ.get("TIMEIN_FORMAT", "plain")

    if output_format == "alfred":
        from .alfred_presenter import AlfredPresenter

        return AlfredPresenter()

    if output_format == "plain":
        from .plain_presenter import PlainPresenter

        return PlainPresenter()

    raise ValueError(f"Unknown output format: {output_format!r}")
