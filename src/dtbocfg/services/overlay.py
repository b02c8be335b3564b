"""OverlayService — create, remove, load, install, list, and status.

Each method runs one overlay command against the configfs root and
returns a :class:`ServiceResult`. ``data["actions"]`` lists the configfs
calls described (and, outside dry-run, executed) for that command.

Install is create followed by load with no rollback: if the load fails,
the slot stays created and the result says so.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from dtbocfg.infrastructure.actions import CompilerError
from dtbocfg.infrastructure.configfs import ConfigRootMissingError, SlotNotFoundError
from dtbocfg.services.base import BaseService
from dtbocfg.services.result import ServiceResult

if TYPE_CHECKING:
    from dtbocfg.domain.request import SourceArtifact

log = structlog.get_logger(__name__)

# Failures the configfs layer reports for expected conditions.
_EXPECTED = (ConfigRootMissingError, SlotNotFoundError, CompilerError, OSError)


class OverlayService(BaseService):
    """Runs overlay commands against an :class:`OverlayConfigFs`."""

    # ------------------------------------------------------------------
    # Slot lifecycle
    # ------------------------------------------------------------------

    def create(self, name: str) -> ServiceResult:
        """Create the overlay slot directory *name*."""
        op = "create"
        data: dict[str, Any] = {"name": name}
        try:
            path = self._fs.create_slot(name)
        except _EXPECTED as exc:
            return self._failure(op, exc, data)
        log.debug("slot.created", name=name, path=str(path))
        return self._success(op, {**data, "path": str(path)})

    def remove(self, name: str) -> ServiceResult:
        """Remove the overlay slot directory *name*."""
        op = "remove"
        data: dict[str, Any] = {"name": name}
        try:
            path = self._fs.remove_slot(name)
        except _EXPECTED as exc:
            return self._failure(op, exc, data)
        log.debug("slot.removed", name=name, path=str(path))
        return self._success(op, {**data, "path": str(path)})

    def load(self, name: str, source: SourceArtifact) -> ServiceResult:
        """Write *source* into slot *name* and request activation."""
        op = "load"
        data: dict[str, Any] = {
            "name": name,
            "format": source.format.value,
            "source": str(source.path),
        }
        try:
            report = self._fs.load(name, source)
        except _EXPECTED as exc:
            return self._failure(op, exc, data)
        log.debug(
            "slot.loaded", name=name, format=source.format.value, activated=report.activated
        )
        data.update(dtbo=str(self._fs.dtbo_path(name)), activated=report.activated)
        if report.compiler_stderr:
            data["stderr"] = report.compiler_stderr
        return self._success(op, data)

    def install(self, name: str, source: SourceArtifact) -> ServiceResult:
        """Create slot *name*, then load *source* into it.

        A load failure after a successful create leaves the slot in place;
        the failed result carries ``data["created"] = True`` and a warning.
        """
        op = "install"
        created = self.create(name)
        if not created.ok:
            return created.model_copy(update={"op": op})

        loaded = self.load(name, source)
        actions = [*created.data["actions"], *loaded.data["actions"]]
        data = {**loaded.data, "created": True, "actions": actions}
        if not loaded.ok:
            warning = (
                f"Overlay slot '{name}' was created but not loaded; "
                "remove it or retry the load."
            )
            return loaded.model_copy(update={"op": op, "data": data, "warnings": [warning]})
        return loaded.model_copy(update={"op": op, "data": data})

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def list_slots(self) -> ServiceResult:
        """List overlay slot names under the root."""
        op = "list"
        try:
            names = self._fs.list_slots()
        except _EXPECTED as exc:
            return self._failure(op, exc, {})
        return self._success(op, {"items": names, "count": len(names)})

    def status(self, name: str | None = None) -> ServiceResult:
        """Report the status file of slot *name*, or of every slot."""
        op = "status"
        data: dict[str, Any] = {"name": name}
        try:
            found = self._fs.read_status(name)
        except _EXPECTED as exc:
            return self._failure(op, exc, data)
        items = [{"slot": path.name, "path": str(path), "status": value} for path, value in found]
        return self._success(op, {**data, "items": items, "count": len(items)})
