"""Shared pytest fixtures for dtbo-config tests.

A temporary directory stands in for the configfs overlay root; the
``CONFIG_DTBO_PATH`` env var points the CLI at it.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from dtbocfg.infrastructure.configfs import OverlayConfigFs
from dtbocfg.infrastructure.runner import ActionRunner

# Minimal FDT header magic; content is never parsed.
BLOB_BYTES = b"\xd0\x0d\xfe\xed" + b"\x00" * 36
COMPILED_BYTES = b"\xd0\x0d\xfe\xed" + b"\x11" * 36

_ENV_VARS = (
    "CONFIG_DTBO_PATH",
    "DTBO_CONFIG_FILE",
    "DTBO_CONFIG_DTC",
    "DTBO_CONFIG_DTC_FLAGS",
    "DTBO_CONFIG_VERBOSE",
    "DTBO_CONFIG_DEBUG",
    "DTBO_CONFIG_DRY_RUN",
    "DTBO_CONFIG_JSON_OUTPUT",
    "DTBO_CONFIG_LOG_JSON",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment from leaking into settings."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def overlay_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty overlay root, exported as ``CONFIG_DTBO_PATH``."""
    root = tmp_path / "overlays"
    root.mkdir()
    monkeypatch.setenv("CONFIG_DTBO_PATH", str(root))
    return root


@pytest.fixture
def echoed() -> list[str]:
    """Collects lines the action runner echoes."""
    return []


@pytest.fixture
def configfs(overlay_root: Path, echoed: list[str]) -> OverlayConfigFs:
    """OverlayConfigFs on the temporary root, executing for real."""
    return OverlayConfigFs(overlay_root, ActionRunner(echo=echoed.append))


@pytest.fixture
def dry_configfs(overlay_root: Path, echoed: list[str]) -> OverlayConfigFs:
    """OverlayConfigFs on the temporary root in dry-run mode."""
    return OverlayConfigFs(overlay_root, ActionRunner(dry_run=True, echo=echoed.append))


@pytest.fixture
def blob_file(tmp_path: Path) -> Path:
    """A precompiled overlay blob named ``my-overlay.dtb``."""
    path = tmp_path / "src" / "my-overlay.dtb"
    path.parent.mkdir(exist_ok=True)
    path.write_bytes(BLOB_BYTES)
    return path


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """An overlay source named ``my-overlay.dts``."""
    path = tmp_path / "src" / "my-overlay.dts"
    path.parent.mkdir(exist_ok=True)
    path.write_text("/dts-v1/;\n/plugin/;\n/ {\n};\n", encoding="utf-8")
    return path


@pytest.fixture
def make_slot(overlay_root: Path) -> Callable[..., Path]:
    """Create a slot the way the kernel exposes it, with a status file."""

    def _make(name: str, status: str | None = "0") -> Path:
        slot = overlay_root / name
        slot.mkdir()
        if status is not None:
            (slot / "status").write_text(f"{status}\n", encoding="ascii")
        return slot

    return _make


@pytest.fixture
def fake_dtc() -> Generator[MagicMock]:
    """Patch the compiler subprocess to succeed with ``COMPILED_BYTES``."""
    with patch("dtbocfg.infrastructure.actions.subprocess.run") as run:
        run.side_effect = lambda argv, **_kw: subprocess.CompletedProcess(
            argv, 0, stdout=COMPILED_BYTES, stderr=b""
        )
        yield run


@pytest.fixture
def failing_dtc() -> Generator[MagicMock]:
    """Patch the compiler subprocess to fail with exit status 2."""
    with patch("dtbocfg.infrastructure.actions.subprocess.run") as run:
        run.side_effect = lambda argv, **_kw: subprocess.CompletedProcess(
            argv, 2, stdout=b"", stderr=b"Error: my-overlay.dts:3.1-2 syntax error\n"
        )
        yield run


@pytest.fixture
def warning_dtc() -> Generator[MagicMock]:
    """Patch the compiler subprocess to succeed while printing a warning."""
    with patch("dtbocfg.infrastructure.actions.subprocess.run") as run:
        run.side_effect = lambda argv, **_kw: subprocess.CompletedProcess(
            argv,
            0,
            stdout=COMPILED_BYTES,
            stderr=b"my-overlay.dts: Warning (unit_address_vs_reg): /fragment@0: no reg\n",
        )
        yield run
