"""OverlayConfigFs — the overlay configuration root and its slots.

The on-disk protocol is owned by the kernel: one directory per slot under
the root, a ``dtbo`` blob file written by us, and a ``status`` file holding
``0`` or ``1``. This module maps slot operations onto typed actions and
routes every one of them through the :class:`ActionRunner`.

INVARIANT: the root must exist and be a directory before any slot
operation. :meth:`OverlayConfigFs.check_root` enforces this.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from dtbocfg.domain.request import SourceArtifact, SourceFormat
from dtbocfg.infrastructure.actions import (
    DTBO_FILENAME,
    STATUS_FILENAME,
    CompileSource,
    CopyBlob,
    ListSlots,
    MakeSlot,
    RemoveSlot,
    ScanStatus,
    WriteStatus,
)
from dtbocfg.infrastructure.runner import ActionRunner

if TYPE_CHECKING:
    from dtbocfg.config.settings import DtboSettings

logger = logging.getLogger(__name__)

# Status values after which an activation request is written.
ACTIVATABLE_STATUS = frozenset({"0", "1"})


class ConfigRootMissingError(Exception):
    """The overlay configuration root does not exist."""

    def __init__(self, root: Path, source: str | None = None) -> None:
        self.root = root
        self.source = source
        where = f" specified in {source}" if source else ""
        super().__init__(f"{root}{where} does not exist")


class SlotNotFoundError(Exception):
    """A named overlay slot does not exist under the root."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No such overlay slot: {path}")


@dataclass(frozen=True)
class LoadReport:
    """What a load did beyond writing ``dtbo``."""

    activated: bool
    compiler_stderr: str = ""


class OverlayConfigFs:
    """Slot-level operations on one overlay configuration root."""

    def __init__(
        self,
        root: Path,
        runner: ActionRunner,
        *,
        compiler: tuple[str, ...] = ("dtc", "-@", "-I", "dts", "-O", "dtb"),
        root_source: str | None = None,
    ) -> None:
        self.root = root
        self.root_source = root_source
        self.runner = runner
        self.compiler = compiler

    @classmethod
    def from_settings(
        cls,
        settings: DtboSettings,
        *,
        echo: Callable[[str], None] | None = None,
    ) -> OverlayConfigFs:
        runner = ActionRunner(dry_run=settings.dry_run, verbose=settings.verbose, echo=echo)
        return cls(
            settings.overlay_root,
            runner,
            compiler=settings.compiler_argv,
            root_source=settings.overlay_root_source,
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def check_root(self) -> None:
        """Raise :class:`ConfigRootMissingError` unless the root is a directory."""
        if not self.root.is_dir():
            raise ConfigRootMissingError(self.root, self.root_source)

    def slot_path(self, name: str) -> Path:
        return self.root / name

    def dtbo_path(self, name: str) -> Path:
        return self.slot_path(name) / DTBO_FILENAME

    def status_path(self, name: str) -> Path:
        return self.slot_path(name) / STATUS_FILENAME

    # ------------------------------------------------------------------
    # Slot lifecycle
    # ------------------------------------------------------------------

    def create_slot(self, name: str) -> Path:
        self.check_root()
        path = self.slot_path(name)
        self.runner.run(MakeSlot(path))
        return path

    def remove_slot(self, name: str) -> Path:
        self.check_root()
        path = self.slot_path(name)
        self.runner.run(RemoveSlot(path))
        return path

    def load(self, name: str, source: SourceArtifact) -> LoadReport:
        """Write the slot's ``dtbo`` from *source*, then request activation."""
        self.check_root()
        dest = self.dtbo_path(name)
        compiler_stderr = ""
        if source.format is SourceFormat.DTS:
            compile_action = CompileSource(self.compiler, source.path, dest)
            compiler_stderr = self.runner.run(compile_action) or ""
        else:
            self.runner.run(CopyBlob(source.path, dest))
        return LoadReport(activated=self.activate(name), compiler_stderr=compiler_stderr)

    def activate(self, name: str) -> bool:
        """Write ``1`` to the slot's status file if it reads ``0`` or ``1``.

        A missing status file is skipped silently.
        """
        status = self.status_path(name)
        if not status.is_file():
            logger.debug("No status file at %s; activation skipped", status)
            return False
        current = status.read_text(encoding="utf-8", errors="replace").strip()
        if current not in ACTIVATABLE_STATUS:
            logger.debug("Status of %s is %r; activation skipped", name, current)
            return False
        self.runner.run(WriteStatus(status))
        return True

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def list_slots(self) -> list[str]:
        """Slot names, sorted; empty in dry-run mode."""
        self.check_root()
        return self.runner.run(ListSlots(self.root)) or []

    def read_status(self, name: str | None = None) -> list[tuple[Path, str]]:
        """``(slot path, status)`` for one slot, or all slots when *name* is None."""
        self.check_root()
        base = self.root
        if name is not None:
            base = self.slot_path(name)
            if not base.is_dir():
                raise SlotNotFoundError(base)
        return self.runner.run(ScanStatus(base)) or []
