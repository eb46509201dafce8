#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Archive extraction
Zip and tar.gz unpacking that refuses entries escaping the destination
"""

from __future__ import annotations

import gzip
import os
import shutil
import stat
import tarfile
import zipfile
import zlib
from pathlib import Path, PureWindowsPath
from typing import Iterable

from config import ARCHIVE_MAX_UNCOMPRESSED_BYTES, JAVA_EXECUTABLE_NAMES
from launcher.errors import ArchiveError
from utils.core.logging import get_logger

log = get_logger()

IS_WINDOWS = os.name == "nt"

# Raised by the decompressors on damaged or truncated data
_ZIP_READ_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, NotImplementedError)
_TAR_READ_ERRORS = (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError)


def safe_destination(root: Path, name: str) -> Path:
    """Resolve an archive entry name below root.

    Raises:
        ArchiveError: the name is absolute, drive-qualified or climbs out of root
    """
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or PureWindowsPath(name).drive:
        raise ArchiveError(f"Archive entry has an absolute path: {name!r}")
    destination = (root / normalized).resolve()
    try:
        destination.relative_to(root)
    except ValueError:
        raise ArchiveError(f"Archive entry escapes the destination: {name!r}") from None
    return destination


def _grant_exec(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _check_budget(total: int) -> None:
    if total > ARCHIVE_MAX_UNCOMPRESSED_BYTES:
        raise ArchiveError("Archive expands beyond the allowed size")


def extract_zip_safely(archive_path: Path, target_dir: Path) -> int:
    """Extract a zip archive into target_dir, validating every entry first.

    Unix permission bits stored in the archive propagate the executable flag
    on non-Windows hosts.

    Returns:
        Number of files written
    """
    root = Path(target_dir).resolve()
    root.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with zipfile.ZipFile(archive_path) as archive:
            members = archive.infolist()
            # Validate everything before writing anything
            plan = []
            total = 0
            for member in members:
                if not member.filename:
                    continue
                plan.append((member, safe_destination(root, member.filename)))
                total += member.file_size
                _check_budget(total)

            for member, destination in plan:
                if member.is_dir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(member) as src, open(destination, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                written += 1
                unix_mode = member.external_attr >> 16
                if not IS_WINDOWS and unix_mode & 0o111:
                    _grant_exec(destination)
    except _ZIP_READ_ERRORS as exc:
        raise ArchiveError(f"Corrupt zip archive {Path(archive_path).name}: {exc}") from exc
    return written


def extract_tar_safely(archive_path: Path, target_dir: Path) -> int:
    """Extract a tar.gz archive into target_dir.

    Symlinks are recreated only when their target stays inside target_dir;
    device and fifo entries are skipped.

    Returns:
        Number of regular files written
    """
    root = Path(target_dir).resolve()
    root.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with tarfile.open(archive_path, mode="r:*") as archive:
            members = archive.getmembers()
            total = 0
            for member in members:
                safe_destination(root, member.name)
                if member.issym() or member.islnk():
                    _link_target(root, member)
                if member.isfile():
                    total += member.size
                    _check_budget(total)

            for member in members:
                destination = safe_destination(root, member.name)
                if member.isdir():
                    destination.mkdir(parents=True, exist_ok=True)
                elif member.isfile():
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    src = archive.extractfile(member)
                    if src is None:
                        raise ArchiveError(f"Unreadable tar entry {member.name!r}")
                    with src, open(destination, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    written += 1
                    if not IS_WINDOWS and member.mode & 0o111:
                        _grant_exec(destination)
                elif member.issym() and not IS_WINDOWS:
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    if destination.is_symlink() or destination.exists():
                        destination.unlink()
                    os.symlink(member.linkname, destination)
                elif member.islnk():
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    source = _link_target(root, member)
                    if source.is_file():
                        shutil.copy2(source, destination)
                else:
                    log.debug(f"[RUNTIME] Skipping special tar entry {member.name}")
    except _TAR_READ_ERRORS as exc:
        raise ArchiveError(f"Corrupt tar archive {Path(archive_path).name}: {exc}") from exc
    return written


def _link_target(root: Path, member: tarfile.TarInfo) -> Path:
    if member.islnk():
        # Hard link names are relative to the archive root
        return safe_destination(root, member.linkname)
    if member.linkname.startswith("/") or PureWindowsPath(member.linkname).drive:
        raise ArchiveError(f"Archive link {member.name!r} points to an absolute path")
    parent = safe_destination(root, member.name).parent
    target = (parent / member.linkname).resolve()
    try:
        target.relative_to(root)
    except ValueError:
        raise ArchiveError(f"Archive link {member.name!r} escapes the destination") from None
    return target


def extract_archive(archive_path: Path, target_dir: Path) -> int:
    """Dispatch on the file name: .zip or .tar.gz/.tgz"""
    name = Path(archive_path).name.lower()
    if name.endswith(".zip"):
        return extract_zip_safely(archive_path, target_dir)
    if name.endswith((".tar.gz", ".tgz", ".tar")):
        return extract_tar_safely(archive_path, target_dir)
    raise ArchiveError(f"Unsupported archive format: {Path(archive_path).name}")


def find_executable(root: Path, names: Iterable[str] = JAVA_EXECUTABLE_NAMES) -> Path:
    """Search root for the first regular file named like the runtime launcher.

    Candidates inside a "bin" directory win over other matches.

    Raises:
        ArchiveError: no matching file exists below root
    """
    wanted = set(names)
    matches = sorted(
        (p for p in Path(root).rglob("*") if p.name in wanted and p.is_file()),
        key=lambda p: (p.parent.name != "bin", len(p.parts), str(p)),
    )
    if not matches:
        raise ArchiveError(f"No runtime executable ({', '.join(sorted(wanted))}) found under {root}")
    return matches[0]


def make_executable(path: Path) -> None:
    if not IS_WINDOWS:
        _grant_exec(path)
