#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Downloader
Fetches missing or corrupted client files from the CDN
"""

from __future__ import annotations

import concurrent.futures
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests

from config import (
    CLIENT_CDN_BASE_URL,
    DOWNLOAD_CHUNK_SIZE,
    DOWNLOAD_PART_SUFFIX,
    DOWNLOAD_WORKERS_DEFAULT,
    DOWNLOAD_PROGRESS_INTERVAL_S,
    EXECUTOR_POLL_INTERVAL_S,
    UPDATER_LOG_PREFIX,
)
from launcher.errors import AggregateDownloadError, ConfigurationError, PipelineCancelled, TransportError
from launcher.manifest.flattener import resolve_client_file
from launcher.models import DownloadSet
from utils.core.logging import get_named_logger
from utils.download.http_session import build_session, http_timeout

updater_log = get_named_logger("updater", prefix=UPDATER_LOG_PREFIX)

EMPTY_MD5 = "d41d8cd98f00b204e9800998ecf8427e"


@dataclass(frozen=True)
class DownloadProgress:
    """Snapshot of a running batch

    bytes_total is the sum of manifest sizes for the batch and may be 0 when
    the manifest omits them; fraction then falls back to the file count.
    """
    path: str
    files_done: int
    files_total: int
    bytes_done: int
    bytes_total: int
    bytes_per_second: float = 0.0

    @property
    def fraction(self) -> float:
        if self.bytes_total > 0:
            return min(1.0, self.bytes_done / self.bytes_total)
        if self.files_total > 0:
            return self.files_done / self.files_total
        return 1.0


ProgressCallback = Callable[[DownloadProgress], None]


def format_speed(bytes_per_second: float) -> str:
    """Human readable transfer rate, e.g. "2.4 MB/s" """
    rate = float(bytes_per_second)
    for unit in ("B/s", "KB/s", "MB/s"):
        if rate < 1024:
            return f"{rate:.1f} {unit}"
        rate /= 1024
    return f"{rate:.1f} GB/s"


@dataclass(frozen=True)
class DownloadOutcome:
    """Result of one file in a batch"""
    path: str
    ok: bool
    error: Optional[str] = None
    cancelled: bool = False


def build_file_url(relative_path: str, base_url: str = CLIENT_CDN_BASE_URL) -> str:
    """CDN base joined with the percent-encoded relative path ('/' kept)"""
    return base_url.rstrip("/") + "/" + quote(relative_path.lstrip("/"), safe="/")


class FileDownloader:
    """Streams client files to disk; batches continue past individual failures"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = CLIENT_CDN_BASE_URL,
        workers: int = DOWNLOAD_WORKERS_DEFAULT,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
        timeout=None,
    ):
        self.workers = max(1, workers)
        self.session = session if session is not None else build_session(self.workers)
        self.base_url = base_url
        self.chunk_size = chunk_size
        self.timeout = timeout if timeout is not None else http_timeout()

    def download_file(
        self,
        relative_path: str,
        destination: Path,
        *,
        allow_empty: bool = False,
        cancel_event: Optional[threading.Event] = None,
        on_bytes: Optional[Callable[[int], None]] = None,
    ) -> int:
        """Download one file to destination.

        The body is streamed to "<destination>.part" and moved into place
        only once complete, so a failed transfer never leaves a file at the
        final path.

        Args:
            relative_path: Server-side path below the CDN base
            destination: Final local path
            allow_empty: Accept a zero-byte body (manifest expects an empty file)
            cancel_event: Checked between chunks
            on_bytes: Receives the size of every chunk written

        Returns:
            Number of bytes written

        Raises:
            TransportError: network failure, non-2xx status or empty body
            PipelineCancelled: cancel_event was set mid-transfer
            OSError: the file couldn't be written
        """
        url = build_file_url(relative_path, self.base_url)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        part_path = destination.with_name(destination.name + DOWNLOAD_PART_SUFFIX)

        bytes_written = 0
        try:
            try:
                with self.session.get(url, stream=True, timeout=self.timeout) as r:
                    if not 200 <= r.status_code < 300:
                        raise TransportError(f"HTTP {r.status_code} for {url}", url=url, status=r.status_code)
                    with open(part_path, "wb") as fh:
                        for chunk in r.iter_content(self.chunk_size):
                            if cancel_event is not None and cancel_event.is_set():
                                raise PipelineCancelled(f"Download of {relative_path} cancelled")
                            if not chunk:
                                continue
                            fh.write(chunk)
                            bytes_written += len(chunk)
                            if on_bytes is not None:
                                on_bytes(len(chunk))
            except requests.RequestException as exc:
                raise TransportError(f"{type(exc).__name__} for {url}: {exc}", url=url) from exc

            if bytes_written == 0 and not allow_empty:
                raise TransportError(f"Empty response body for {url}", url=url)
            os.replace(part_path, destination)
        finally:
            if part_path.exists():
                try:
                    part_path.unlink()
                except OSError as e:
                    updater_log.warning(f"[DOWNLOAD] Could not remove partial file {part_path.name}: {e}")

        updater_log.debug(f"[DOWNLOAD] {relative_path} ({bytes_written} bytes)")
        return bytes_written

    def download_all(
        self,
        base_path: Path,
        download_set: DownloadSet,
        progress_callback: Optional[ProgressCallback] = None,
        *,
        remote_paths: Optional[Mapping[str, str]] = None,
        sizes: Optional[Mapping[str, int]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """Download every entry of download_set below base_path.

        Every entry is attempted even when earlier ones fail; files that
        succeeded stay on disk.

        Args:
            base_path: Client root
            download_set: Client-root path -> expected hash
            progress_callback: Receives a DownloadProgress when a file starts or
                finishes, and at most every DOWNLOAD_PROGRESS_INTERVAL_S while bytes arrive
            remote_paths: Client-root path -> server path where they differ
            sizes: Client-root path -> manifest size, for byte-level progress
            cancel_event: Entries not yet started are skipped once set

        Returns:
            Number of files downloaded

        Raises:
            AggregateDownloadError: one or more files failed
            PipelineCancelled: cancel_event was set before the batch finished
        """
        base_path = Path(base_path)
        remote_paths = remote_paths or {}
        sizes = sizes or {}
        total = len(download_set)
        if total == 0:
            return 0

        bytes_total = sum(max(0, sizes.get(path) or 0) for path in download_set)
        started = time.monotonic()
        lock = threading.Lock()
        counters = {"files": 0, "bytes": 0, "reported_at": 0.0}

        def report(path: str, force: bool) -> None:
            if progress_callback is None:
                return
            now = time.monotonic()
            with lock:
                if not force and now - counters["reported_at"] < DOWNLOAD_PROGRESS_INTERVAL_S:
                    return
                counters["reported_at"] = now
                elapsed = now - started
                snapshot = DownloadProgress(
                    path=path,
                    files_done=counters["files"],
                    files_total=total,
                    bytes_done=counters["bytes"],
                    bytes_total=bytes_total,
                    bytes_per_second=counters["bytes"] / elapsed if elapsed > 0 else 0.0,
                )
            progress_callback(snapshot)

        def fetch_one(local_path: str, expected_hash: str) -> DownloadOutcome:
            if cancel_event is not None and cancel_event.is_set():
                return DownloadOutcome(local_path, ok=False, error="cancelled", cancelled=True)
            report(local_path, force=True)

            def on_bytes(count: int) -> None:
                with lock:
                    counters["bytes"] += count
                report(local_path, force=False)

            try:
                self.download_file(
                    remote_paths.get(local_path, local_path),
                    resolve_client_file(base_path, local_path),
                    allow_empty=expected_hash.lower() == EMPTY_MD5,
                    cancel_event=cancel_event,
                    on_bytes=on_bytes,
                )
                outcome = DownloadOutcome(local_path, ok=True)
            except PipelineCancelled:
                outcome = DownloadOutcome(local_path, ok=False, error="cancelled", cancelled=True)
            except (TransportError, ConfigurationError, OSError) as exc:
                updater_log.warning(f"[DOWNLOAD] Failed {local_path}: {exc}")
                outcome = DownloadOutcome(local_path, ok=False, error=str(exc))
            with lock:
                counters["files"] += 1
            report(local_path, force=True)
            return outcome

        items = list(download_set.items())
        updater_log.info(f"[DOWNLOAD] Fetching {total} file(s) with {min(self.workers, total)} worker(s)")

        if self.workers == 1 or total == 1:
            outcomes = [fetch_one(path, expected) for path, expected in items]
        else:
            outcomes = self._run_parallel(fetch_one, items)

        elapsed = time.monotonic() - started
        updater_log.debug(
            f"[DOWNLOAD] {counters['bytes']} bytes in {elapsed:.1f}s"
            f" ({format_speed(counters['bytes'] / elapsed if elapsed > 0 else 0)})"
        )
        return self._summarize(outcomes)

    def _run_parallel(self, fetch_one, items) -> List[DownloadOutcome]:
        outcomes: List[DownloadOutcome] = []
        with ThreadPoolExecutor(max_workers=min(self.workers, len(items)), thread_name_prefix="download") as executor:
            pending = {executor.submit(fetch_one, path, expected) for path, expected in items}
            while pending:
                done, pending = concurrent.futures.wait(
                    pending,
                    timeout=EXECUTOR_POLL_INTERVAL_S,
                    return_when=concurrent.futures.FIRST_COMPLETED,
                )
                for future in done:
                    outcomes.append(future.result())
        return outcomes

    def _summarize(self, outcomes: List[DownloadOutcome]) -> int:
        succeeded = sum(1 for o in outcomes if o.ok)
        cancelled = [o for o in outcomes if o.cancelled]
        failures: Dict[str, str] = {o.path: o.error or "unknown error" for o in outcomes if not o.ok and not o.cancelled}

        if cancelled:
            updater_log.info(f"[DOWNLOAD] Cancelled after {succeeded} file(s); {len(cancelled)} skipped")
            raise PipelineCancelled(f"Download cancelled, {len(cancelled)} file(s) not fetched")
        if failures:
            updater_log.error(f"[DOWNLOAD] {len(failures)} of {len(outcomes)} file(s) failed")
            raise AggregateDownloadError(len(failures), failures)

        updater_log.info(f"[DOWNLOAD] All {succeeded} file(s) downloaded")
        return succeeded
