"""BaseService — shared plumbing for services over an overlay configfs root.

Translates the exceptions raised by the infrastructure layer into
failed :class:`ServiceResult` objects, so the CLI only ever deals with
results.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dtbocfg.infrastructure.actions import CompilerError
from dtbocfg.infrastructure.configfs import ConfigRootMissingError, SlotNotFoundError
from dtbocfg.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from dtbocfg.infrastructure.configfs import OverlayConfigFs

logger = logging.getLogger(__name__)


class BaseService:
    """Base for services operating on an :class:`OverlayConfigFs`."""

    def __init__(self, configfs: OverlayConfigFs) -> None:
        self._fs = configfs

    def _success(
        self,
        op: str,
        data: dict[str, Any],
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        payload = {**data, "dry_run": self._fs.runner.dry_run, "actions": self._fs.runner.drain()}
        return ServiceResult(ok=True, op=op, data=payload, warnings=warnings or [])

    def _failure(
        self,
        op: str,
        exc: Exception,
        data: dict[str, Any],
    ) -> ServiceResult:
        """Build a failed result from an infrastructure exception.

        Only the exception types the infrastructure layer raises for
        expected failures are accepted; anything else is re-raised.
        """
        detail: dict[str, Any] = {"exit_code": 1}
        if isinstance(exc, ConfigRootMissingError):
            code = "CONFIG_ROOT_MISSING"
            message = str(exc)
            detail["path"] = str(exc.root)
        elif isinstance(exc, SlotNotFoundError):
            code = "SLOT_NOT_FOUND"
            message = str(exc)
            detail["path"] = str(exc.path)
        elif isinstance(exc, CompilerError):
            code = "COMPILE_FAILED"
            message = str(exc)
            detail.update(exit_code=exc.returncode, argv=list(exc.argv), stderr=exc.stderr)
        elif isinstance(exc, OSError):
            code = "FS_ERROR"
            reason = exc.strerror or str(exc)
            message = f"{exc.filename}: {reason}" if exc.filename else reason
            detail.update(errno=exc.errno, path=str(exc.filename) if exc.filename else None)
        else:
            raise exc

        logger.debug("%s failed: %s", op, message)
        payload = {**data, "dry_run": self._fs.runner.dry_run, "actions": self._fs.runner.drain()}
        return ServiceResult(
            ok=False,
            op=op,
            data=payload,
            error=ServiceError(code=code, message=message, detail=detail),
        )
