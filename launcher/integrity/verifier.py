#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Integrity Verifier
Hashes local client files and decides which ones must be downloaded again
"""

from __future__ import annotations

import hashlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Tuple

from config import HASH_CHUNK_SIZE, VERIFY_WORKERS_DEFAULT, WILDCARD_HASH
from launcher.errors import IntegrityError
from launcher.models import DownloadSet, FileEntry, FileStatus, FlatManifest
from utils.core.logging import get_logger

log = get_logger()


def calculate_hash(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """MD5 hex digest of a file, read in chunks.

    Raises:
        OSError: the file can't be opened or read
    """
    digest = hashlib.md5()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def hashes_match(actual: str, expected: str) -> bool:
    return actual.strip().lower() == expected.strip().lower()


class IntegrityVerifier:
    """Classifies client files as MISSING, MISMATCH or VALID"""

    def __init__(self, workers: int = VERIFY_WORKERS_DEFAULT):
        self.workers = max(1, workers)

    def calculate_hash(self, path: Path) -> str:
        return calculate_hash(path)

    def check_file(self, path: Path, expected_hash: str, expected_size: Optional[int] = None) -> FileStatus:
        """Classify one file against its expected hash.

        The wildcard hash "any" accepts any existing file. An empty file is a
        MISMATCH whenever the manifest expects content.

        Args:
            path: Absolute path of the local file
            expected_hash: Hex digest from the manifest (case-insensitive)
            expected_size: Size from the manifest, if known

        Raises:
            IntegrityError: the file exists but could not be read
        """
        if not path.exists():
            return FileStatus.MISSING
        if not path.is_file():
            return FileStatus.MISMATCH
        if expected_hash.strip().lower() == WILDCARD_HASH:
            return FileStatus.VALID
        try:
            if expected_size and path.stat().st_size == 0:
                return FileStatus.MISMATCH
            actual = self.calculate_hash(path)
        except OSError as e:
            raise IntegrityError(f"Cannot read {path}: {e}") from e
        return FileStatus.VALID if hashes_match(actual, expected_hash) else FileStatus.MISMATCH

    def _classify(self, base_path: Path, relative_path: str, entry: FileEntry) -> Tuple[str, FileStatus]:
        try:
            status = self.check_file(base_path / relative_path, entry.content_hash, entry.size)
        except IntegrityError as e:
            log.warning(f"[VERIFY] Could not read {relative_path}, scheduling download: {e}")
            status = FileStatus.MISMATCH
        return relative_path, status

    def verify(self, base_path: Path, flat: FlatManifest) -> DownloadSet:
        """Return every manifest entry whose local copy isn't VALID.

        Never raises: unreadable files are treated as mismatched.

        Args:
            base_path: Client root
            flat: Flattened manifest keyed by client-root paths

        Returns:
            Relative path -> expected hash for files that need downloading
        """
        base_path = Path(base_path)
        if not flat:
            return {}

        items = list(flat.items())
        if self.workers == 1 or len(items) == 1:
            results = [self._classify(base_path, rel, entry) for rel, entry in items]
        else:
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="verify") as pool:
                results = list(pool.map(lambda item: self._classify(base_path, item[0], item[1]), items))

        download_set: DownloadSet = {}
        missing = mismatched = 0
        for rel, status in results:
            if status is FileStatus.VALID:
                continue
            download_set[rel] = flat[rel].content_hash
            if status is FileStatus.MISSING:
                missing += 1
            else:
                mismatched += 1

        log.debug(
            f"[VERIFY] {len(items)} file(s) checked: {missing} missing, "
            f"{mismatched} mismatched, {len(items) - len(download_set)} valid"
        )
        return download_set
