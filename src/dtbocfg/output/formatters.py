"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich) or machines (--json).
The formatter layer adapts ServiceResult to the requested output mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dtbocfg.output.renderers import render_result

if TYPE_CHECKING:
    from dtbocfg.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output mode switches derived from the CLI flags."""

    json_output: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output mode; human-readable text when omitted.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, verbose=settings.verbose)
