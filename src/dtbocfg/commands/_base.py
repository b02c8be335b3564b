"""Custom Click pieces: ordered command flags, ``--examples``, usage errors.

Command flags are plain boolean options tagged with the command they
select. :class:`OverlayCommand` reads the parser's occurrence order so
``-c -s`` runs create, then status, and a repeated flag runs again.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

from dtbocfg.domain.request import Command

_COMMANDS_KEY = "dtbocfg.commands"

_F = TypeVar("_F", bound=Callable[..., Any])


class OverlayUsageError(click.UsageError):
    """Usage error that exits with status 1."""

    exit_code = 1


class CommandFlag(click.Option):
    """Boolean flag that selects a :class:`Command`."""

    def __init__(self, *args: Any, command: Command, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.command = command


def command_flag(*param_decls: str, command: Command, help: str) -> Callable[[_F], _F]:  # noqa: A002
    """Declare a flag that selects *command* (value not passed to the callback)."""
    return click.option(
        *param_decls,
        cls=CommandFlag,
        command=command,
        is_flag=True,
        expose_value=False,
        help=help,
    )


def recorded_commands(ctx: click.Context) -> list[Command]:
    """Commands selected on the command line, in the order given."""
    return list(ctx.meta.get(_COMMANDS_KEY, []))


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class OverlayCommand(click.Command):
    """Click Command with an ``--examples`` flag and ordered command flags."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Record command flag occurrences in order, then parse as usual.

        Click processes each parameter once, so repeats and interleaving
        are taken from the raw parse order instead.
        """
        parser = self.make_parser(ctx)
        _opts, _args, order = parser.parse_args(args=list(args))
        ctx.meta[_COMMANDS_KEY] = [p.command for p in order if isinstance(p, CommandFlag)]
        return super().parse_args(ctx, args)
