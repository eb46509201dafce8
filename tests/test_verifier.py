from __future__ import annotations

from pathlib import Path

import pytest

from helpers import md5
from launcher.errors import IntegrityError
from launcher.integrity import IntegrityVerifier, calculate_hash
from launcher.manifest import flatten
from launcher.models import FileEntry, FileManifest, FileStatus


@pytest.mark.parametrize("workers", [1, 4])
def test_verify_reports_missing_and_mismatched_files(tmp_path: Path, workers: int) -> None:
    manifest = FileManifest.from_dict({
        "files": {"a.txt": {"md5": "X", "size": 3}},
        "directories": {"mods": {"files": {"b.jar": {"md5": "Y", "size": 10}}}},
    })
    (tmp_path / "mods").mkdir()
    (tmp_path / "mods" / "b.jar").write_bytes(b"wrong content")

    download_set = IntegrityVerifier(workers=workers).verify(tmp_path, flatten(manifest))

    assert download_set == {"a.txt": "X", "mods/b.jar": "Y"}


def test_verify_accepts_matching_files_case_insensitively(tmp_path: Path) -> None:
    data = b"hello world"
    (tmp_path / "a.txt").write_bytes(data)
    flat = {"a.txt": FileEntry(md5(data).upper(), len(data))}
    verifier = IntegrityVerifier()

    assert verifier.verify(tmp_path, flat) == {}
    # Verification has no side effects: a second pass gives the same answer
    assert verifier.verify(tmp_path, flat) == {}


def test_calculate_hash_matches_hashlib(tmp_path: Path) -> None:
    target = tmp_path / "big.bin"
    data = bytes(range(256)) * 1000
    target.write_bytes(data)

    assert calculate_hash(target) == md5(data)


def test_check_file_wildcard_hash_accepts_any_content(tmp_path: Path) -> None:
    target = tmp_path / "options.txt"
    target.write_text("fov:90", encoding="utf-8")
    verifier = IntegrityVerifier()

    assert verifier.check_file(target, "any") is FileStatus.VALID
    assert verifier.check_file(tmp_path / "absent.txt", "any") is FileStatus.MISSING


def test_check_file_empty_file_with_expected_size_is_mismatch(tmp_path: Path) -> None:
    target = tmp_path / "empty.jar"
    target.write_bytes(b"")

    assert IntegrityVerifier().check_file(target, md5(b""), expected_size=5) is FileStatus.MISMATCH
    assert IntegrityVerifier().check_file(target, md5(b"")) is FileStatus.VALID


def test_check_file_directory_in_place_of_file_is_mismatch(tmp_path: Path) -> None:
    (tmp_path / "mods").mkdir()

    assert IntegrityVerifier().check_file(tmp_path / "mods", "abc") is FileStatus.MISMATCH


def test_verify_treats_unreadable_files_as_mismatch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "locked.jar").write_bytes(b"data")

    def _deny(self, path):
        raise PermissionError("denied")

    monkeypatch.setattr(IntegrityVerifier, "calculate_hash", _deny)

    download_set = IntegrityVerifier(workers=1).verify(tmp_path, {"locked.jar": FileEntry(md5(b"data"), 4)})

    assert download_set == {"locked.jar": md5(b"data")}


def test_check_file_raises_integrity_error_on_read_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "locked.jar").write_bytes(b"data")

    def _deny(self, path):
        raise PermissionError("denied")

    monkeypatch.setattr(IntegrityVerifier, "calculate_hash", _deny)

    with pytest.raises(IntegrityError):
        IntegrityVerifier().check_file(tmp_path / "locked.jar", md5(b"data"))
