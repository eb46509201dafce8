#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extra Archive
Unpacks the server's config bundle (extra.zip) over the client root
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from config import EXTRA_ARCHIVE_NAME, UPDATER_LOG_PREFIX
from launcher.errors import ArchiveError
from launcher.integrity.verifier import calculate_hash, hashes_match
from launcher.runtime.archive import extract_zip_safely
from utils.core.logging import get_named_logger

updater_log = get_named_logger("updater", prefix=UPDATER_LOG_PREFIX)


def find_extra_archive(paths: Iterable[str]) -> Optional[str]:
    for path in paths:
        if path == EXTRA_ARCHIVE_NAME or path.endswith("/" + EXTRA_ARCHIVE_NAME):
            return path
    return None


def apply_extra_archive(client_root: Path, manifest_paths: Iterable[str], extra_checksum: Optional[str]) -> bool:
    """Unpack extra.zip into the client root unless it already matches extra_checksum.

    Args:
        client_root: Client root directory
        manifest_paths: Client-root paths from the flattened manifest
        extra_checksum: Hash the server profile expects for the applied bundle

    Returns:
        True if the archive was unpacked
    """
    relative = find_extra_archive(manifest_paths)
    if relative is None:
        return False
    archive_path = Path(client_root) / relative
    if not archive_path.is_file():
        return False

    if extra_checksum:
        try:
            if hashes_match(calculate_hash(archive_path), extra_checksum):
                updater_log.debug("[EXTRA] Config bundle already applied")
                return False
        except OSError as e:
            updater_log.warning(f"[EXTRA] Could not hash {relative}: {e}")

    try:
        count = extract_zip_safely(archive_path, client_root)
    except (ArchiveError, OSError) as e:
        # A broken config bundle shouldn't block the launch
        updater_log.error(f"[EXTRA] Failed to unpack {relative}: {e}")
        return False
    updater_log.info(f"[EXTRA] Applied config bundle ({count} file(s))")
    return True
