"""Root CLI command for dtbo-config: command flags, modifiers, dispatch."""

from __future__ import annotations

import click

from dtbocfg import __version__
from dtbocfg.commands._base import (
    OverlayCommand,
    OverlayUsageError,
    command_flag,
    recorded_commands,
)
from dtbocfg.commands._context import AppContext
from dtbocfg.commands.dispatch import PROG_NAME, dispatch
from dtbocfg.config.settings import DtboSettings
from dtbocfg.domain.request import Command, RequestError, build_request

_EPILOG = """\b
VARIABLES
    DTS                Device Tree Overlay Source File
    DTB                Device Tree Overlay Blob File
    DT_OVERLAY_NAME    Device Tree Overlay Name
    CONFIG_DTBO_PATH   Device Tree Overlay Configuration Path
    DTBO_CONFIG_FILE   Optional TOML config file
"""


@click.command(
    name=PROG_NAME,
    cls=OverlayCommand,
    context_settings={"help_option_names": []},
    epilog=_EPILOG,
    examples=f"""\
  {PROG_NAME} --install --dts my-overlay.dts
  {PROG_NAME} -c my-overlay
  {PROG_NAME} -l --dtb build/my-overlay.dtb my-overlay
  {PROG_NAME} -n -i --dtb my-overlay.dtb
  {PROG_NAME} -t
  {PROG_NAME} -s my-overlay
  {PROG_NAME} -r my-overlay
  {PROG_NAME} --json -s""",
)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@command_flag("-h", "--help", command=Command.HELP, help="Run Help command.")
@command_flag("-c", "--create", command=Command.CREATE, help="Run Create command.")
@command_flag("-r", "--remove", command=Command.REMOVE, help="Run Remove command.")
@command_flag("-l", "--load", command=Command.LOAD, help="Run Load command.")
@command_flag("-i", "--install", command=Command.INSTALL, help="Run Install command.")
@command_flag("-t", "--list", command=Command.LIST, help="Run List command.")
@command_flag("-s", "--status", command=Command.STATUS, help="Run Status command.")
@click.option("-v", "--verbose", is_flag=True, help="Turn on verbosity.")
@click.option("-d", "--debug", is_flag=True, help="Turn on debug.")
@click.option("-n", "--dry-run", is_flag=True, help="Don't actually run any command.")
@click.option("--dts", metavar="DTS", default=None, help="Device Tree Overlay Source File.")
@click.option("--dtb", metavar="DTB", default=None, help="Device Tree Overlay Blob File.")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--config", "config_path", default=None, help="Override config file path.")
@click.argument("names", metavar="[DT_OVERLAY_NAME]", nargs=-1)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    dry_run: bool,
    dts: str | None,
    dtb: str | None,
    json_output: bool,
    log_json: bool,
    config_path: str | None,
    names: tuple[str, ...],
) -> None:
    """Device Tree Overlay Configure.

    \b
    Create : Create Device Tree Overlay Directory
    Remove : Remove Device Tree Overlay Directory
    Load   : Load to Device Tree Overlay Directory
    Install: Create and Load
    List   : Print List of Device Tree Overlay Directory
    Status : Print Status of Device Tree Overlay Directory

    Commands run in the order their flags are given; with no command
    flag, help is shown. When several names are given, the last one wins.
    """
    settings = DtboSettings.from_cli(
        config_path=config_path,
        verbose=verbose,
        debug=debug,
        dry_run=dry_run,
        json_output=json_output,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app

    try:
        request = build_request(
            recorded_commands(ctx), name=names[-1] if names else None, dts=dts, dtb=dtb
        )
    except RequestError as exc:
        msg = f"{exc} see '{PROG_NAME} --help'."
        raise OverlayUsageError(msg, ctx=ctx) from exc

    help_text = f"{ctx.get_help()}\n\nConfiguration path: {settings.overlay_root}"
    dispatch(app, request, help_text=help_text)
