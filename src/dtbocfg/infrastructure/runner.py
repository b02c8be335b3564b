"""ActionRunner — the single dry-run / verbose execution policy.

Every configfs action passes through :meth:`ActionRunner.run`:

* dry-run: print the description, skip execution
* verbose: print the description, then execute
* otherwise: execute silently

Descriptions are also recorded so services can report the exact action
list (``data.actions``) in JSON output.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click
import structlog

if TYPE_CHECKING:
    from dtbocfg.infrastructure.actions import Action

log = structlog.get_logger(__name__)


class ActionRunner:
    """Apply the dry-run / verbose policy to configfs actions."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        verbose: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.dry_run = dry_run
        self.verbose = verbose
        self._echo = echo if echo is not None else click.echo
        self._history: list[str] = []

    def run(self, action: Action) -> Any:
        """Describe and (unless dry-run) execute *action*.

        Returns whatever the action returns, or None in dry-run mode.
        """
        description = action.describe()
        self._history.append(description)
        log.debug("action", command=description, dry_run=self.dry_run)
        if self.dry_run or self.verbose:
            self._echo(description)
        if self.dry_run:
            return None
        return action.execute()

    def drain(self) -> list[str]:
        """Return and forget the descriptions recorded since the last drain."""
        history, self._history = self._history, []
        return history
