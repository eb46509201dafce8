#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Runtime Provisioner
Finds a cached Java runtime for the client version or downloads and unpacks one
"""

from __future__ import annotations

import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Optional

import requests

from config import DOWNLOAD_CHUNK_SIZE, JAVA_EXECUTABLE_NAMES, UPDATER_LOG_PREFIX
from launcher.errors import ArchiveError, PipelineCancelled, TransportError
from launcher.runtime.archive import extract_archive, find_executable, make_executable
from launcher.runtime.catalog import get_download_url
from launcher.runtime.platform_info import (
    HostArch,
    HostOS,
    RuntimeDescriptor,
    detect_arch,
    detect_os,
)
from launcher.runtime.versions import resolve_major_version
from utils.core.logging import get_named_logger, log_event
from utils.core.paths import get_runtimes_dir
from utils.download.http_session import build_session, http_timeout

updater_log = get_named_logger("updater", prefix=UPDATER_LOG_PREFIX)


def _archive_suffix(url: str) -> str:
    lowered = url.lower()
    for suffix in (".tar.gz", ".tgz", ".zip"):
        if lowered.endswith(suffix):
            return suffix
    return ".zip"


class RuntimeProvisioner:
    """Resolves the Java executable a client version needs, downloading it on a cache miss"""

    def __init__(
        self,
        runtimes_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        host_os: Optional[HostOS] = None,
        host_arch: Optional[HostArch] = None,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
        timeout=None,
    ):
        self.runtimes_dir = Path(runtimes_dir) if runtimes_dir is not None else get_runtimes_dir()
        self.session = session if session is not None else build_session(1)
        self.host_os = host_os
        self.host_arch = host_arch
        self.chunk_size = chunk_size
        self.timeout = timeout if timeout is not None else http_timeout()

    def describe(self, client_version: str) -> RuntimeDescriptor:
        return RuntimeDescriptor(
            major_version=resolve_major_version(client_version),
            os=self.host_os or detect_os(),
            arch=self.host_arch or detect_arch(),
        )

    def locate_cached(self, descriptor: RuntimeDescriptor) -> Optional[Path]:
        install_dir = self.runtimes_dir / descriptor.cache_key
        if not install_dir.is_dir():
            return None
        try:
            executable = find_executable(install_dir, JAVA_EXECUTABLE_NAMES)
        except ArchiveError:
            return None
        if descriptor.os is not HostOS.WINDOWS and not os.access(executable, os.X_OK):
            make_executable(executable)
        return executable

    def resolve_runtime(self, client_version: str, cancel_event: Optional[threading.Event] = None) -> Path:
        """Return the path of a java executable suitable for client_version.

        Raises:
            ConfigurationError: no build for this platform
            TransportError: the runtime archive couldn't be downloaded
            ArchiveError: the archive is corrupt, unsafe or has no executable
        """
        descriptor = self.describe(client_version)
        cached = self.locate_cached(descriptor)
        if cached is not None:
            updater_log.info(f"[RUNTIME] Using cached {descriptor.cache_key}")
            return cached

        url = get_download_url(descriptor)
        install_dir = self.runtimes_dir / descriptor.cache_key
        self.runtimes_dir.mkdir(parents=True, exist_ok=True)
        updater_log.info(f"[RUNTIME] Downloading Java {descriptor.major_version} for {descriptor.os.value}/{descriptor.arch.value}")

        fd, tmp_name = tempfile.mkstemp(prefix="runtime-", suffix=_archive_suffix(url), dir=self.runtimes_dir)
        os.close(fd)
        archive_path = Path(tmp_name)
        try:
            self._download(url, archive_path, cancel_event)
            executable = self._install(archive_path, install_dir)
        finally:
            archive_path.unlink(missing_ok=True)

        log_event(updater_log, "Runtime installed", "☕", {
            "Version": descriptor.major_version,
            "Path": executable,
        })
        return executable

    def _install(self, archive_path: Path, install_dir: Path) -> Path:
        """Unpack into a staging directory and move it into the cache slot only once complete.

        A failed extraction leaves no directory behind that locate_cached could pick up.
        """
        staging = Path(tempfile.mkdtemp(prefix=f".{install_dir.name}-", dir=self.runtimes_dir))
        try:
            extract_archive(archive_path, staging)
            relative = find_executable(staging, JAVA_EXECUTABLE_NAMES).relative_to(staging)
            if install_dir.exists():
                shutil.rmtree(install_dir)
            os.replace(staging, install_dir)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        executable = install_dir / relative
        make_executable(executable)
        return executable

    def _download(self, url: str, target: Path, cancel_event: Optional[threading.Event]) -> None:
        written = 0
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as r:
                if not 200 <= r.status_code < 300:
                    raise TransportError(f"HTTP {r.status_code} for {url}", url=url, status=r.status_code)
                with open(target, "wb") as fh:
                    for chunk in r.iter_content(self.chunk_size):
                        if cancel_event is not None and cancel_event.is_set():
                            raise PipelineCancelled("Runtime download cancelled")
                        if chunk:
                            fh.write(chunk)
                            written += len(chunk)
        except requests.RequestException as exc:
            raise TransportError(f"{type(exc).__name__} for {url}: {exc}", url=url) from exc
        if written == 0:
            raise TransportError(f"Empty response body for {url}", url=url)
