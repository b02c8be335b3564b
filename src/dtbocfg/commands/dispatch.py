"""Dispatcher — run the commands of an OverlayRequest in order.

Each command fully completes (result emitted) before the next starts.
The first failing command ends the run with that command's exit code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import click

from dtbocfg.domain.request import Command, OverlayRequest
from dtbocfg.services.overlay import OverlayService
from dtbocfg.services.result import ServiceResult

if TYPE_CHECKING:
    from dtbocfg.commands._context import AppContext

logger = logging.getLogger(__name__)

PROG_NAME = "dtbo-config"


def _create(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    assert request.name is not None
    return service.create(request.name)


def _remove(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    assert request.name is not None
    return service.remove(request.name)


def _load(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    assert request.name is not None and request.source is not None
    return service.load(request.name, request.source)


def _install(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    assert request.name is not None and request.source is not None
    return service.install(request.name, request.source)


def _list(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    return service.list_slots()


def _status(service: OverlayService, request: OverlayRequest) -> ServiceResult:
    return service.status(request.name)


HANDLERS: dict[Command, Callable[[OverlayService, OverlayRequest], ServiceResult]] = {
    Command.CREATE: _create,
    Command.REMOVE: _remove,
    Command.LOAD: _load,
    Command.INSTALL: _install,
    Command.LIST: _list,
    Command.STATUS: _status,
}


def dispatch(app: AppContext, request: OverlayRequest, *, help_text: str) -> None:
    """Run every command in *request*, emitting each result as it completes.

    Raises:
        SystemExit: From :meth:`AppContext.emit` on the first failure.
    """
    announce = app.settings.verbose or app.settings.debug
    for command in request.commands:
        logger.debug("Running command: %s", request.describe(command))
        if announce:
            app.echo(f"## {PROG_NAME}: {request.describe(command)}")

        if command is Command.HELP:
            if app.settings.json_output:
                app.emit(ServiceResult(ok=True, op="help", data={"text": help_text}))
            else:
                click.echo(help_text)
            continue

        service = OverlayService(app.configfs)
        app.emit(HANDLERS[command](service, request))
