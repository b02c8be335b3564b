"""Typed filesystem and process actions against the overlay configfs.

Each action is a frozen description of one external call. ``describe()``
renders the shell equivalent (what ``--dry-run`` and ``--verbose`` print);
``execute()`` performs it with direct filesystem or subprocess APIs.
No action goes through a shell.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

DTBO_FILENAME = "dtbo"
STATUS_FILENAME = "status"

# Shell convention for "command not found".
_EXIT_NOT_FOUND = 127


class CompilerError(RuntimeError):
    """The device-tree compiler exited non-zero or could not be run."""

    def __init__(self, argv: tuple[str, ...], returncode: int, stderr: str) -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"{argv[0]}: {detail}")


@dataclass(frozen=True)
class Action:
    """Base class for a single describable, executable configfs call."""

    def describe(self) -> str:
        raise NotImplementedError

    def execute(self) -> object:
        raise NotImplementedError


@dataclass(frozen=True)
class MakeSlot(Action):
    """Create an overlay slot directory (fails if it exists)."""

    path: Path

    def describe(self) -> str:
        return shlex.join(["mkdir", str(self.path)])

    def execute(self) -> None:
        self.path.mkdir()


@dataclass(frozen=True)
class RemoveSlot(Action):
    """Remove an overlay slot directory (fails if missing or non-empty)."""

    path: Path

    def describe(self) -> str:
        return shlex.join(["rmdir", str(self.path)])

    def execute(self) -> None:
        self.path.rmdir()


@dataclass(frozen=True)
class CopyBlob(Action):
    """Copy a precompiled overlay blob into a slot's ``dtbo`` file."""

    source: Path
    dest: Path

    def describe(self) -> str:
        return f"cat {shlex.quote(str(self.source))} > {shlex.quote(str(self.dest))}"

    def execute(self) -> int:
        data = self.source.read_bytes()
        self.dest.write_bytes(data)
        return len(data)


@dataclass(frozen=True)
class CompileSource(Action):
    """Compile overlay source with ``dtc`` into a slot's ``dtbo`` file.

    The compiler's stdout is written to *dest* only on a zero exit, so a
    failed compile leaves no partial blob behind. A successful compile
    returns the compiler's stderr (warnings), empty when there are none.
    """

    compiler: tuple[str, ...]
    source: Path
    dest: Path

    @property
    def argv(self) -> tuple[str, ...]:
        return (*self.compiler, str(self.source))

    def describe(self) -> str:
        return f"{shlex.join(self.argv)} > {shlex.quote(str(self.dest))}"

    def execute(self) -> str:
        try:
            proc = subprocess.run(self.argv, capture_output=True, check=False)
        except FileNotFoundError as exc:
            raise CompilerError(self.argv, _EXIT_NOT_FOUND, exc.strerror or "not found") from exc
        stderr = proc.stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise CompilerError(self.argv, proc.returncode, stderr)
        self.dest.write_bytes(proc.stdout)
        return stderr


@dataclass(frozen=True)
class WriteStatus(Action):
    """Write an activation request to a slot's ``status`` file."""

    path: Path
    value: str = "1"

    def describe(self) -> str:
        return f"echo {self.value} > {shlex.quote(str(self.path))}"

    def execute(self) -> None:
        self.path.write_text(f"{self.value}\n", encoding="ascii")


@dataclass(frozen=True)
class ListSlots(Action):
    """List the entries of the overlay root, sorted by name."""

    root: Path

    def describe(self) -> str:
        return shlex.join(["ls", "-1", str(self.root)])

    def execute(self) -> list[str]:
        return sorted(entry.name for entry in self.root.iterdir())


@dataclass(frozen=True)
class ScanStatus(Action):
    """Read every ``status`` file below *base* (the root or one slot).

    Returns ``(directory, value)`` pairs sorted by directory, with the
    trailing newline stripped from each value.
    """

    base: Path

    def describe(self) -> str:
        return (
            f"find {shlex.quote(str(self.base))} -name {STATUS_FILENAME} "
            "-printf '%h : %f = ' -exec cat {} \\;"
        )

    def execute(self) -> list[tuple[Path, str]]:
        found: list[tuple[Path, str]] = []
        for status in sorted(self.base.rglob(STATUS_FILENAME)):
            if not status.is_file():
                continue
            value = status.read_text(encoding="utf-8", errors="replace").rstrip("\n")
            found.append((status.parent, value))
        return found
