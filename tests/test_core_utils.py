from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from utils.core.issue_reporter import issues_path, report_issue
from utils.core.paths import get_client_dir, get_runtimes_dir, get_user_data_dir
from utils.threading import ThreadManager, create_daemon_thread


def test_data_dir_override_and_subfolders(data_dir: Path) -> None:
    assert get_user_data_dir() == data_dir
    assert get_client_dir("Industrial") == data_dir / "clients" / "Industrial"
    assert get_runtimes_dir().is_dir()


@pytest.mark.skipif(os.name == "nt", reason="XDG layout applies to Linux and macOS")
def test_data_dir_defaults_to_xdg_on_posix(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LUMEN_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_user_data_dir() == tmp_path / "Lumen"


@pytest.mark.parametrize("server_id", ["", "..", "../escape", "a/b", "a\\b", "C:evil"])
def test_client_dir_must_be_a_single_folder(data_dir: Path, server_id: str) -> None:
    with pytest.raises(ValueError):
        get_client_dir(server_id)

    assert not (data_dir / "escape").exists()


def test_report_issue_appends_and_dedupes(data_dir: Path) -> None:
    report_issue("DOWNLOADING_FAILED", "error", "3 file(s) failed", details={"stage": "downloading"}, hint="Retry")
    report_issue("DOWNLOADING_FAILED", "error", "3 file(s) failed")

    text = issues_path().read_text(encoding="utf-8")

    assert text.count("DOWNLOADING_FAILED") == 1
    assert "| ERROR | DOWNLOADING_FAILED | 3 file(s) failed" in text
    assert "stage=downloading" in text
    assert "Fix: Retry" in text


def test_thread_manager_calls_stop_method_and_joins() -> None:
    stop = threading.Event()
    worker = create_daemon_thread(stop.wait, name="Waiter", args=(10,))
    worker.start()
    manager = ThreadManager()
    manager.register("Waiter", worker, stop_method=stop.set)

    still_alive, _ = manager.stop_all(timeout=5)

    assert still_alive == []
    assert manager.alive_threads == []
    assert worker.daemon
