"""Rich Console factory and theme for dtbo-config output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DTBO_THEME = Theme(
    {
        "dtbo.error": "bold red",
        "dtbo.op": "bold cyan",
        "dtbo.path": "dim",
        "dtbo.status.on": "green",
        "dtbo.status.off": "yellow",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "1": "dtbo.status.on",
    "0": "dtbo.status.off",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width. Wide by default so long configfs
            paths are never wrapped.
    """
    return Console(
        file=StringIO(),
        theme=DTBO_THEME,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
        width=width or 200,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(value: str) -> str:
    """Return the Rich style name for a status file value."""
    return _STATUS_STYLES.get(value, "")
