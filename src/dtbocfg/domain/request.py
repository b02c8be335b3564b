"""OverlayRequest — the immutable result of argument resolution.

Built exactly once from the parsed command line and handed to the
dispatcher. All usage validation happens here, before any command runs:

- create/remove/load/install need an overlay name, derived from the
  source file's base name when not given explicitly.
- load/install need exactly one of ``--dts`` / ``--dtb``.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel


class Command(StrEnum):
    """Commands selectable by CLI flag, in the order flags may appear."""

    HELP = "help"
    CREATE = "create"
    REMOVE = "remove"
    LOAD = "load"
    INSTALL = "install"
    LIST = "list"
    STATUS = "status"


class SourceFormat(StrEnum):
    """Overlay source artifact formats."""

    DTS = "dts"
    DTB = "dtb"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


# Commands that operate on a single named slot.
NAMED_COMMANDS = frozenset({Command.CREATE, Command.REMOVE, Command.LOAD, Command.INSTALL})

# Commands that write a source artifact into a slot.
SOURCE_COMMANDS = frozenset({Command.LOAD, Command.INSTALL})

_NAME_HINT = "DT_OVERLAY_NAME"


class RequestError(ValueError):
    """Raised when the command line cannot be resolved into a request."""


class SourceArtifact(BaseModel):
    """A device-tree source (``.dts``) or precompiled blob (``.dtb``)."""

    model_config = {"frozen": True}

    format: SourceFormat
    path: Path


class OverlayRequest(BaseModel):
    """Everything one invocation asks for, resolved and validated.

    Attributes:
        commands: Commands in command-line order.
        name: Overlay slot name (explicit or derived), if any.
        source: The artifact to load, for load/install.
    """

    model_config = {"frozen": True}

    commands: tuple[Command, ...] = (Command.HELP,)
    name: str | None = None
    source: SourceArtifact | None = None

    def describe(self, command: Command) -> str:
        """Return ``command`` followed by the arguments it will run with."""
        parts = [command.value]
        if command in NAMED_COMMANDS or (command is Command.STATUS and self.name):
            parts.append(self.name or "")
        if command in SOURCE_COMMANDS and self.source is not None:
            parts.extend([self.source.format.value, str(self.source.path)])
        return " ".join(parts)


def strip_suffix(filename: str, suffix: str) -> str:
    """Strip *suffix* from the base name of *filename*, like ``basename``.

    The suffix is kept when it makes up the whole base name.
    """
    base = filename.rstrip("/").rsplit("/", 1)[-1]
    if base.endswith(suffix) and base != suffix:
        return base[: -len(suffix)]
    return base


def derive_overlay_name(*, dts: str | None, dtb: str | None) -> str | None:
    """Derive an overlay name from whichever source file was given.

    ``--dts`` takes precedence over ``--dtb``.
    """
    if dts:
        return strip_suffix(dts, SourceFormat.DTS.suffix) or None
    if dtb:
        return strip_suffix(dtb, SourceFormat.DTB.suffix) or None
    return None


def validate_overlay_name(name: str) -> str:
    """Ensure *name* is a single path component under the overlay root."""
    if name in ("", ".", "..") or "/" in name or "\0" in name:
        msg = f"Invalid {_NAME_HINT} {name!r}: must be a single directory name."
        raise RequestError(msg)
    return name


def resolve_source(*, dts: str | None, dtb: str | None) -> SourceArtifact:
    """Pick the single source artifact for load/install."""
    if not dts and not dtb:
        raise RequestError("Please specify either DTS or DTB.")
    if dts and dtb:
        raise RequestError("Please specify only one of DTS or DTB.")
    if dts:
        return SourceArtifact(format=SourceFormat.DTS, path=Path(dts))
    assert dtb is not None
    return SourceArtifact(format=SourceFormat.DTB, path=Path(dtb))


def build_request(
    commands: Iterable[Command],
    *,
    name: str | None = None,
    dts: str | None = None,
    dtb: str | None = None,
) -> OverlayRequest:
    """Resolve CLI values into an :class:`OverlayRequest`.

    Raises:
        RequestError: On a missing or invalid name, or a missing or
            conflicting source option.
    """
    ordered = tuple(commands) or (Command.HELP,)
    requested = set(ordered)

    if requested & NAMED_COMMANDS and not name:
        name = derive_overlay_name(dts=dts, dtb=dtb)
        if not name:
            raise RequestError(f"Please specify {_NAME_HINT}.")
    if name:
        validate_overlay_name(name)

    source: SourceArtifact | None = None
    if requested & SOURCE_COMMANDS:
        source = resolve_source(dts=dts, dtb=dtb)

    return OverlayRequest(commands=ordered, name=name or None, source=source)
