"""Tests for configfs actions — descriptions and direct execution."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dtbocfg.infrastructure.actions import (
    CompileSource,
    CompilerError,
    CopyBlob,
    ListSlots,
    MakeSlot,
    RemoveSlot,
    ScanStatus,
    WriteStatus,
)

DTC = ("dtc", "-@", "-I", "dts", "-O", "dtb")


class TestDescribe:
    def test_make_slot(self) -> None:
        assert MakeSlot(Path("/cfg/foo")).describe() == "mkdir /cfg/foo"

    def test_remove_slot(self) -> None:
        assert RemoveSlot(Path("/cfg/foo")).describe() == "rmdir /cfg/foo"

    def test_copy_blob(self) -> None:
        action = CopyBlob(Path("/b/foo.dtb"), Path("/cfg/foo/dtbo"))
        assert action.describe() == "cat /b/foo.dtb > /cfg/foo/dtbo"

    def test_compile_source(self) -> None:
        action = CompileSource(DTC, Path("/s/foo.dts"), Path("/cfg/foo/dtbo"))
        assert action.describe() == "dtc -@ -I dts -O dtb /s/foo.dts > /cfg/foo/dtbo"

    def test_write_status(self) -> None:
        assert WriteStatus(Path("/cfg/foo/status")).describe() == "echo 1 > /cfg/foo/status"

    def test_list_slots(self) -> None:
        assert ListSlots(Path("/cfg")).describe() == "ls -1 /cfg"

    def test_scan_status(self) -> None:
        assert ScanStatus(Path("/cfg")).describe() == (
            "find /cfg -name status -printf '%h : %f = ' -exec cat {} \\;"
        )

    def test_paths_are_quoted(self) -> None:
        assert MakeSlot(Path("/cfg/a b")).describe() == "mkdir '/cfg/a b'"


class TestSlotActions:
    def test_make_and_remove(self, tmp_path: Path) -> None:
        slot = tmp_path / "foo"
        MakeSlot(slot).execute()
        assert slot.is_dir()
        RemoveSlot(slot).execute()
        assert not slot.exists()

    def test_make_existing_fails(self, tmp_path: Path) -> None:
        with pytest.raises(FileExistsError):
            MakeSlot(tmp_path).execute()

    def test_remove_non_empty_fails(self, tmp_path: Path) -> None:
        (tmp_path / "foo").mkdir()
        (tmp_path / "foo" / "dtbo").write_bytes(b"x")
        with pytest.raises(OSError):
            RemoveSlot(tmp_path / "foo").execute()

    def test_remove_missing_fails(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            RemoveSlot(tmp_path / "foo").execute()


class TestCopyBlob:
    def test_copies_bytes(self, tmp_path: Path) -> None:
        src = tmp_path / "foo.dtb"
        src.write_bytes(b"\xd0\x0d\xfe\xed")
        dest = tmp_path / "dtbo"
        assert CopyBlob(src, dest).execute() == 4
        assert dest.read_bytes() == b"\xd0\x0d\xfe\xed"

    def test_unreadable_source_leaves_dest_untouched(self, tmp_path: Path) -> None:
        dest = tmp_path / "dtbo"
        with pytest.raises(FileNotFoundError):
            CopyBlob(tmp_path / "missing.dtb", dest).execute()
        assert not dest.exists()


class TestCompileSource:
    def test_runs_compiler_without_shell(self, tmp_path: Path) -> None:
        dest = tmp_path / "dtbo"
        src = tmp_path / "foo.dts"
        done = subprocess.CompletedProcess([], 0, stdout=b"BLOB", stderr=b"")
        with patch("dtbocfg.infrastructure.actions.subprocess.run", return_value=done) as run:
            assert CompileSource(DTC, src, dest).execute() == ""
        run.assert_called_once()
        argv = run.call_args.args[0]
        assert argv == (*DTC, str(src))
        assert "shell" not in run.call_args.kwargs
        assert dest.read_bytes() == b"BLOB"

    def test_warnings_returned_on_success(self, tmp_path: Path) -> None:
        dest = tmp_path / "dtbo"
        warned = subprocess.CompletedProcess(
            [], 0, stdout=b"BLOB", stderr=b"Warning (unit_address_vs_reg): /fragment@0\n"
        )
        with patch("dtbocfg.infrastructure.actions.subprocess.run", return_value=warned):
            stderr = CompileSource(DTC, tmp_path / "foo.dts", dest).execute()
        assert stderr.startswith("Warning (unit_address_vs_reg)")
        assert dest.read_bytes() == b"BLOB"

    def test_failure_raises_and_writes_nothing(self, tmp_path: Path) -> None:
        dest = tmp_path / "dtbo"
        failed = subprocess.CompletedProcess([], 1, stdout=b"partial", stderr=b"syntax error\n")
        with patch("dtbocfg.infrastructure.actions.subprocess.run", return_value=failed):
            with pytest.raises(CompilerError) as excinfo:
                CompileSource(DTC, tmp_path / "foo.dts", dest).execute()
        assert excinfo.value.returncode == 1
        assert "syntax error" in excinfo.value.stderr
        assert not dest.exists()

    def test_missing_compiler(self, tmp_path: Path) -> None:
        run = MagicMock(side_effect=FileNotFoundError(2, "No such file or directory"))
        with patch("dtbocfg.infrastructure.actions.subprocess.run", run):
            with pytest.raises(CompilerError) as excinfo:
                CompileSource(("no-dtc",), tmp_path / "foo.dts", tmp_path / "dtbo").execute()
        assert excinfo.value.returncode == 127
        assert str(excinfo.value).startswith("no-dtc:")


class TestInspection:
    def test_write_status(self, tmp_path: Path) -> None:
        status = tmp_path / "status"
        status.write_text("0\n")
        WriteStatus(status).execute()
        assert status.read_text() == "1\n"

    def test_list_slots_sorted(self, tmp_path: Path) -> None:
        for name in ("b", "a", "c"):
            (tmp_path / name).mkdir()
        assert ListSlots(tmp_path).execute() == ["a", "b", "c"]

    def test_scan_status_all(self, tmp_path: Path) -> None:
        for name, value in (("b", "1"), ("a", "0")):
            (tmp_path / name).mkdir()
            (tmp_path / name / "status").write_text(f"{value}\n")
        (tmp_path / "c").mkdir()
        assert ScanStatus(tmp_path).execute() == [(tmp_path / "a", "0"), (tmp_path / "b", "1")]

    def test_scan_status_one_slot(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "status").write_text("1\n")
        assert ScanStatus(tmp_path / "a").execute() == [(tmp_path / "a", "1")]
