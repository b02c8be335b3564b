"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Every overlay operation returns a ServiceResult. Expected
failures (missing root, missing slot, filesystem or compiler errors) are
results with ``ok=False``, never exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``detail["exit_code"]`` carries the process exit status to use.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one overlay operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Command name (``"create"``, ``"load"``, ``"status"``, ...).
        data: Operation payload; always includes ``actions``, the
            described configfs calls in order.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status implied by this result."""
        if self.ok:
            return 0
        if self.error is None:
            return 1
        return int(self.error.detail.get("exit_code", 1))
