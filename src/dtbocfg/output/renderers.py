"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Slot mutations print nothing on success.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from rich.text import Text

from dtbocfg.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from dtbocfg.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_mutation)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="dtbo.error")
    op = Text(f"  {result.op}", style="dtbo.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if k == "stderr":
                continue
            console.print(Text(f"    {k}: {v}"))


# ── Mutation renderer ─────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/remove/load/install: nothing, the actions were already echoed."""


# ── Inspection renderers ──────────────────────────────────────────────


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render slot names one per line."""
    for name in result.data.get("items", []):
        console.print(Text(str(name)))


def _render_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ``<path> : status = <value>`` lines."""
    for item in result.data.get("items", []):
        value = str(item.get("status", ""))
        console.print(
            Text(str(item.get("path", "")), style="dtbo.path"),
            Text(" : status = "),
            Text(value, style=style_for_status(value)),
            sep="",
        )


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "list": _render_list,
    "status": _render_status,
}
