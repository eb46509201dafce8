from __future__ import annotations

import threading
from pathlib import Path

import pytest
import requests

from helpers import FakeResponse, FakeSession, make_zip, md5
from launcher.download import DownloadProgress, FileDownloader, apply_extra_archive, build_file_url, format_speed
from launcher.download.file_downloader import EMPTY_MD5
from launcher.errors import AggregateDownloadError, PipelineCancelled, TransportError
from launcher.integrity import IntegrityVerifier
from launcher.models import FileEntry

BASE_URL = "https://cdn.example/clients/"


def _downloader(session: FakeSession, workers: int = 1) -> FileDownloader:
    return FileDownloader(session=session, base_url=BASE_URL, workers=workers, chunk_size=4)


def test_build_file_url_quotes_segments_but_keeps_slashes() -> None:
    assert build_file_url("mods/My Mod [1].jar", BASE_URL) == "https://cdn.example/clients/mods/My%20Mod%20%5B1%5D.jar"
    assert build_file_url("/a.txt", "https://cdn.example/clients") == "https://cdn.example/clients/a.txt"


def test_download_file_writes_body_atomically(tmp_path: Path) -> None:
    session = FakeSession({"mods/b.jar": FakeResponse(body=b"0123456789")})
    destination = tmp_path / "mods" / "b.jar"

    written = _downloader(session).download_file("mods/b.jar", destination)

    assert written == 10
    assert destination.read_bytes() == b"0123456789"
    assert not (tmp_path / "mods" / "b.jar.part").exists()


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status_code=404),
        FakeResponse(status_code=500, body=b"oops"),
        FakeResponse(body=b""),
        FakeResponse(error=requests.ConnectionError("reset by peer")),
    ],
)
def test_download_file_failures_leave_nothing_behind(tmp_path: Path, response: FakeResponse) -> None:
    session = FakeSession({"a.txt": response})
    destination = tmp_path / "a.txt"

    with pytest.raises(TransportError):
        _downloader(session).download_file("a.txt", destination)

    assert not destination.exists()
    assert list(tmp_path.iterdir()) == []


def test_download_file_keeps_previous_copy_when_transfer_fails(tmp_path: Path) -> None:
    destination = tmp_path / "a.txt"
    destination.write_bytes(b"old")
    session = FakeSession({"a.txt": FakeResponse(error=requests.Timeout("slow"))})

    with pytest.raises(TransportError):
        _downloader(session).download_file("a.txt", destination)

    assert destination.read_bytes() == b"old"


@pytest.mark.parametrize("workers", [1, 3])
def test_download_all_continues_past_failures(tmp_path: Path, workers: int) -> None:
    session = FakeSession({
        "ok1.txt": FakeResponse(body=b"one"),
        "bad.txt": FakeResponse(status_code=503),
        "ok2.txt": FakeResponse(body=b"two"),
    })
    download_set = {"ok1.txt": md5(b"one"), "bad.txt": "deadbeef", "ok2.txt": md5(b"two")}

    with pytest.raises(AggregateDownloadError) as excinfo:
        _downloader(session, workers).download_all(tmp_path, download_set)

    assert excinfo.value.failed_count == 1
    assert set(excinfo.value.failures) == {"bad.txt"}
    # Every entry was attempted and the good ones stay on disk
    assert len(session.requests) == 3
    assert (tmp_path / "ok1.txt").read_bytes() == b"one"
    assert (tmp_path / "ok2.txt").read_bytes() == b"two"
    assert not (tmp_path / "bad.txt").exists()


def test_download_all_then_verify_is_clean(tmp_path: Path) -> None:
    files = {"a.txt": b"abc", "mods/b.jar": b"jar-bytes", "config/empty.cfg": b""}
    session = FakeSession({name: FakeResponse(body=data) for name, data in files.items()})
    flat = {name: FileEntry(md5(data), len(data)) for name, data in files.items()}
    verifier = IntegrityVerifier(workers=1)
    download_set = verifier.verify(tmp_path, flat)
    progress = []

    count = _downloader(session, workers=2).download_all(
        tmp_path, download_set, lambda p: progress.append((p.files_done, p.files_total))
    )

    assert count == 3
    assert download_set["config/empty.cfg"] == EMPTY_MD5
    assert verifier.verify(tmp_path, flat) == {}
    assert (3, 3) in progress
    assert all(total == 3 for _, total in progress)


def test_download_all_uses_remote_paths_for_urls(tmp_path: Path) -> None:
    session = FakeSession({"Industrial/mods/a.jar": FakeResponse(body=b"a")})

    _downloader(session).download_all(
        tmp_path,
        {"mods/a.jar": md5(b"a")},
        remote_paths={"mods/a.jar": "Industrial/mods/a.jar"},
    )

    assert session.requests == [BASE_URL + "Industrial/mods/a.jar"]
    assert (tmp_path / "mods" / "a.jar").read_bytes() == b"a"


def test_download_all_empty_set_makes_no_requests(tmp_path: Path) -> None:
    session = FakeSession()

    assert _downloader(session).download_all(tmp_path, {}) == 0
    assert session.requests == []


def test_download_all_skips_remaining_files_once_cancelled(tmp_path: Path) -> None:
    session = FakeSession({"a.txt": FakeResponse(body=b"a"), "b.txt": FakeResponse(body=b"b")})
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(PipelineCancelled):
        _downloader(session).download_all(tmp_path, {"a.txt": md5(b"a"), "b.txt": md5(b"b")}, cancel_event=cancel)

    assert session.requests == []


def test_apply_extra_archive_unpacks_until_checksum_matches(tmp_path: Path) -> None:
    archive = make_zip([("config/server.cfg", b"port=25565")])
    (tmp_path / "extra.zip").write_bytes(archive)

    assert apply_extra_archive(tmp_path, ["mods/a.jar", "extra.zip"], extra_checksum="stale") is True
    assert (tmp_path / "config" / "server.cfg").read_bytes() == b"port=25565"

    assert apply_extra_archive(tmp_path, ["extra.zip"], extra_checksum=md5(archive).upper()) is False
    assert apply_extra_archive(tmp_path, ["mods/a.jar"], extra_checksum=None) is False


def test_apply_extra_archive_ignores_broken_bundle(tmp_path: Path) -> None:
    (tmp_path / "extra.zip").write_bytes(b"not a zip")

    assert apply_extra_archive(tmp_path, ["extra.zip"], extra_checksum=None) is False


def test_download_all_reports_bytes_against_manifest_sizes(tmp_path: Path) -> None:
    bodies = {"a.bin": b"x" * 10, "b.bin": b"y" * 6}
    session = FakeSession({name: FakeResponse(body=data) for name, data in bodies.items()})
    progress = []

    _downloader(session).download_all(
        tmp_path,
        {name: md5(data) for name, data in bodies.items()},
        progress.append,
        sizes={name: len(data) for name, data in bodies.items()},
    )

    assert all(p.bytes_total == 16 and p.files_total == 2 for p in progress)
    assert [p.bytes_done for p in progress] == sorted(p.bytes_done for p in progress)
    last = progress[-1]
    assert (last.files_done, last.bytes_done) == (2, 16)
    assert last.fraction == 1.0


def test_download_progress_fraction_falls_back_to_file_count() -> None:
    assert DownloadProgress("a", 1, 4, 500, 0).fraction == 0.25
    assert DownloadProgress("a", 1, 4, 50, 200).fraction == 0.25
    assert DownloadProgress("a", 4, 4, 300, 200).fraction == 1.0


def test_download_file_reports_each_chunk(tmp_path: Path) -> None:
    session = FakeSession({"a.bin": FakeResponse(body=b"0123456789")})
    chunks = []

    _downloader(session).download_file("a.bin", tmp_path / "a.bin", on_bytes=chunks.append)

    assert chunks == [4, 4, 2]


def test_format_speed_picks_unit() -> None:
    assert format_speed(512) == "512.0 B/s"
    assert format_speed(2.5 * 1024 * 1024) == "2.5 MB/s"


def test_download_all_refuses_paths_outside_client_root(tmp_path: Path) -> None:
    root = tmp_path / "clients" / "srv"
    root.mkdir(parents=True)
    session = FakeSession({"evil.txt": FakeResponse(body=b"bad"), "ok.txt": FakeResponse(body=b"ok")})

    with pytest.raises(AggregateDownloadError) as excinfo:
        _downloader(session).download_all(root, {"mods/../../evil.txt": md5(b"bad"), "ok.txt": md5(b"ok")})

    assert set(excinfo.value.failures) == {"mods/../../evil.txt"}
    assert not (tmp_path / "clients" / "evil.txt").exists()
    assert (root / "ok.txt").read_bytes() == b"ok"
