"""AppContext — per-invocation state shared by the dispatcher.

Created once by the CLI entry point. Provides lazy configfs
initialization and centralized result emission (stdout/stderr routing
and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dtbocfg.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from dtbocfg.config.settings import DtboSettings
    from dtbocfg.infrastructure.configfs import OverlayConfigFs
    from dtbocfg.services.result import ServiceResult


def _discard(_line: str) -> None:
    """Drop action echo (JSON mode carries actions in the payload)."""


class AppContext:
    """Settings, the configfs facade, and output handling for one run.

    The configfs facade is created on first use so ``--help`` and
    ``--version`` never touch the overlay root.
    """

    def __init__(self, settings: DtboSettings) -> None:
        self.settings = settings
        self._configfs: OverlayConfigFs | None = None

        from dtbocfg.config.logging import configure_logging

        configure_logging(debug=settings.debug, log_json=settings.log_json)

    @property
    def configfs(self) -> OverlayConfigFs:
        """The overlay configfs facade (created lazily on first access)."""
        if self._configfs is None:
            from dtbocfg.infrastructure.configfs import OverlayConfigFs

            echo = _discard if self.settings.json_output else None
            self._configfs = OverlayConfigFs.from_settings(self.settings, echo=echo)
        return self._configfs

    def echo(self, message: str) -> None:
        """Print an informational line (suppressed in JSON mode)."""
        if not self.settings.json_output:
            click.echo(message)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with ``result.exit_code``.

        Compiler stderr (warnings on success, errors on failure) is passed
        through to stderr verbatim outside JSON mode.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
        else:
            click.echo(output, err=True)

        stderr = result.error.detail.get("stderr") if result.error else result.data.get("stderr")
        if stderr and not settings.json_output:
            click.echo(stderr.rstrip("\n"), err=True)

        # In JSON mode, warnings are already in the serialized payload.
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

        if not result.ok:
            raise SystemExit(result.exit_code)
