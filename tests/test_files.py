from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest

from red_engine.errors import (
    EditorIOError,
    FileTooLargeError,
    InvalidFileError,
    IsDirectoryError,
    PermissionDeniedError,
    describe_startup_error,
)
from red_engine.session import (
    CrashContext,
    FileWatcher,
    RecentFiles,
    clear_crash_logs,
    format_path,
    read_file,
    validate_startup_path,
    write_crash_log,
)
from red_engine.session.files import PROBE_FILE_NAME


def test_validate_rejects_directories(tmp_path: Path) -> None:
    with pytest.raises(IsDirectoryError):
        validate_startup_path(tmp_path)


def test_validate_rejects_large_files(tmp_path: Path) -> None:
    target = tmp_path / "big.txt"
    target.write_text("x" * 11)

    with pytest.raises(FileTooLargeError) as excinfo:
        validate_startup_path(target, max_size=10)

    assert excinfo.value.size == 11
    assert excinfo.value.path == target


def test_validate_accepts_existing_writable_file(tmp_path: Path) -> None:
    target = tmp_path / "notes.txt"
    target.write_text("hello\n")

    assert validate_startup_path(target) == target
    assert target.read_text() == "hello\n"


def test_validate_new_file_probes_parent(tmp_path: Path) -> None:
    target = tmp_path / "new.txt"

    assert validate_startup_path(target) == target
    assert not target.exists()
    assert not (tmp_path / PROBE_FILE_NAME).exists()


def test_validate_new_file_in_missing_directory_is_accepted(tmp_path: Path) -> None:
    target = tmp_path / "missing" / "new.txt"

    assert validate_startup_path(target) == target
    assert not (tmp_path / "missing").exists()


def test_startup_error_messages() -> None:
    assert (
        describe_startup_error(PermissionDeniedError("nope"))
        == "Permission denied. Use 'sudo red' to edit this file."
    )
    assert describe_startup_error(IsDirectoryError("dir")) == "Cannot edit a directory."
    assert describe_startup_error(FileTooLargeError("big")) == "File is too large (>100MB)."
    assert describe_startup_error(InvalidFileError("bad")) == "Invalid file: bad"
    assert describe_startup_error(EditorIOError("disk")) == "Error: disk"


def test_read_file_replaces_invalid_utf8(tmp_path: Path) -> None:
    target = tmp_path / "binary.txt"
    target.write_bytes(b"ok\xff\n")

    assert read_file(target) == "ok\ufffd\n"


def test_format_path_shortens_home() -> None:
    home = Path("/home/ada")

    assert format_path(home / "src" / "main.py", home=home) == "~/src/main.py"
    assert format_path(home, home=home) == "~"
    assert format_path(Path("/etc/hosts"), home=home) == "/etc/hosts"


def test_file_watcher_flags_outside_changes(tmp_path: Path) -> None:
    target = tmp_path / "watched.txt"
    target.write_text("one\n")
    now = [0.0]
    watcher = FileWatcher(interval=1.0, clock=lambda: now[0])
    watcher.bind(target)

    assert watcher.poll() is False

    later = target.stat().st_mtime + 10
    os.utime(target, (later, later))
    now[0] += 0.5
    assert watcher.poll() is False  # throttled
    now[0] += 1.0
    assert watcher.poll(modal_active=True) is False
    assert watcher.poll() is True

    watcher.acknowledge()
    now[0] += 1.0
    assert watcher.poll() is False


def test_file_watcher_ignores_own_saves(tmp_path: Path) -> None:
    target = tmp_path / "saved.txt"
    target.write_text("one\n")
    now = [0.0]
    watcher = FileWatcher(interval=1.0, clock=lambda: now[0])
    watcher.bind(target)

    later = target.stat().st_mtime + 10
    os.utime(target, (later, later))
    watcher.mark_saved(later)
    now[0] += 5
    assert watcher.poll() is False


def test_recent_files_most_recent_first_and_capped(tmp_path: Path) -> None:
    store = tmp_path / "config" / "history"
    recent = RecentFiles(store, limit=3)
    paths = [tmp_path / f"f{i}.txt" for i in range(4)]
    for path in paths:
        path.write_text("")
        recent.add(path)
    recent.add(paths[1])

    assert recent.paths == [paths[1], paths[3], paths[2]]
    assert store.read_text().splitlines() == [str(p) for p in recent.paths]


def test_recent_files_load_flags_missing_entries(tmp_path: Path) -> None:
    store = tmp_path / "history"
    present = tmp_path / "here.txt"
    present.write_text("")
    gone = tmp_path / "gone.txt"
    store.write_text(f"{present}\n{gone}\n{present}\n")

    entries = RecentFiles(store).load()

    assert [entry.path for entry in entries] == [present, gone]
    assert [entry.exists for entry in entries] == [True, False]


def test_crash_log_records_state_and_tail(tmp_path: Path) -> None:
    context = CrashContext(
        path=Path("/tmp/demo.py"),
        modified=True,
        cursor=(2, 6),
        modal="find",
        lines=[f"line {i}" for i in range(7)],
    )

    log = write_crash_log(
        tmp_path / "logs", "boom", context, now=datetime(2024, 5, 1, 12, 30, 5)
    )

    assert log is not None
    assert log.name == "red_error_2024-05-01_12-30-05.log"
    report = log.read_text()
    assert "Error: boom" in report
    assert "Modified: True" in report
    assert "Cursor: (2, 6)" in report
    assert "Modal: find" in report
    assert "1: line 1" not in report
    assert "2: line 2" in report
    assert "6: line 6" in report

    assert clear_crash_logs(tmp_path / "logs") == 1
    assert not log.exists()
