#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Natives & assets preparation
Unpacks the platform libraries and asset bundle a client needs before launch
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

import requests

from config import (
    ASSETS_DIR_NAME,
    ASSETS_MIN_OBJECTS,
    DOWNLOAD_CHUNK_SIZE,
    LWJGL_FALLBACK_MODULES,
    LWJGL_FALLBACK_VERSION,
    LWJGL_MAVEN_BASE_URL,
    NATIVE_LIBRARY_SUFFIXES,
)
from launcher.errors import ArchiveError, TransportError
from launcher.launch.version_profiles import VersionProfile
from launcher.runtime.archive import extract_zip_safely
from launcher.runtime.platform_info import HostArch, HostOS, detect_arch, detect_os
from utils.core.logging import get_logger
from utils.download.http_session import build_session, http_timeout

log = get_logger()

_EXPECTED_SUFFIX = {
    HostOS.WINDOWS: (".dll",),
    HostOS.LINUX: (".so",),
    HostOS.MACOS: (".dylib", ".jnilib"),
}
_LWJGL2_OS = {HostOS.WINDOWS: "windows", HostOS.LINUX: "linux", HostOS.MACOS: "osx"}


def natives_valid(natives_dir: Path, host_os: HostOS) -> bool:
    """True when natives_dir holds at least one library for host_os at its top level"""
    if not natives_dir.is_dir():
        return False
    suffixes = _EXPECTED_SUFFIX[host_os]
    return any(p.is_file() and p.name.lower().endswith(suffixes) for p in natives_dir.iterdir())


def flatten_natives(natives_dir: Path) -> int:
    """Move shared libraries found in sub-directories up to natives_dir"""
    moved = 0
    for lib in list(natives_dir.rglob("*")):
        if not lib.is_file() or not lib.name.lower().endswith(NATIVE_LIBRARY_SUFFIXES):
            continue
        if lib.parent == natives_dir:
            continue
        os.replace(lib, natives_dir / lib.name)
        moved += 1
    return moved


def _clear_directory(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


class NativesPreparer:
    """Provides the natives directory and the assets tree for a client version"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        host_os: Optional[HostOS] = None,
        host_arch: Optional[HostArch] = None,
    ):
        self.session = session if session is not None else build_session(1)
        self.host_os = host_os or detect_os()
        self.host_arch = host_arch or detect_arch()

    def prepare_natives(self, client_root: Path, profile: VersionProfile, version: str) -> Path:
        """Make sure the profile's natives directory holds libraries for this OS.

        A server-provided bin/natives-<version>[-<os>].zip is tried first, then
        LWJGL artifacts from Maven Central. Failures are logged; the launch
        proceeds and the client reports missing natives itself.

        Returns:
            Absolute natives directory
        """
        natives_dir = (client_root / profile.natives_dir).absolute()
        if natives_valid(natives_dir, self.host_os):
            log.debug(f"[NATIVES] Natives valid for {self.host_os.value} ({version})")
            return natives_dir

        _clear_directory(natives_dir)
        bin_dir = client_root / "bin"
        candidates = [
            bin_dir / f"natives-{version}-{self.host_os.value}.zip",
            bin_dir / f"natives-{version}.zip",
        ]
        for archive in candidates:
            if not archive.is_file():
                continue
            log.info(f"[NATIVES] Unpacking {archive.name}")
            try:
                extract_zip_safely(archive, natives_dir)
                flatten_natives(natives_dir)
            except (ArchiveError, OSError) as e:
                log.error(f"[NATIVES] Failed to unpack {archive.name}: {e}")
            if natives_valid(natives_dir, self.host_os):
                return natives_dir
            _clear_directory(natives_dir)

        log.warning(f"[NATIVES] No usable natives for {version}, downloading from Maven Central")
        for url in self.fallback_urls(profile):
            self._download_and_unpack(url, natives_dir)
        flatten_natives(natives_dir)
        if not natives_valid(natives_dir, self.host_os):
            log.error(f"[NATIVES] Natives for {self.host_os.value} are still missing in {natives_dir}")
        return natives_dir

    def fallback_urls(self, profile: VersionProfile) -> List[str]:
        if profile.lwjgl2_version:
            v = profile.lwjgl2_version
            classifier = f"natives-{_LWJGL2_OS[self.host_os]}"
            return [f"{LWJGL_MAVEN_BASE_URL}lwjgl/lwjgl-platform/{v}/lwjgl-platform-{v}-{classifier}.jar"]

        classifier = f"natives-{self.host_os.value}"
        if self.host_arch is HostArch.ARM64:
            classifier += "-arm64"
        v = LWJGL_FALLBACK_VERSION
        return [
            f"{LWJGL_MAVEN_BASE_URL}{module}/{v}/{module}-{v}-{classifier}.jar"
            for module in LWJGL_FALLBACK_MODULES
        ]

    def _download_and_unpack(self, url: str, natives_dir: Path) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix="natives-", suffix=".jar")
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            with self.session.get(url, stream=True, timeout=http_timeout()) as r:
                if not 200 <= r.status_code < 300:
                    raise TransportError(f"HTTP {r.status_code} for {url}", url=url, status=r.status_code)
                with open(tmp_path, "wb") as fh:
                    for chunk in r.iter_content(DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
            extract_zip_safely(tmp_path, natives_dir)
        except (requests.RequestException, TransportError, ArchiveError, OSError) as e:
            log.error(f"[NATIVES] Failed to fetch {url}: {e}")
        finally:
            tmp_path.unlink(missing_ok=True)

    def prepare_assets(self, client_root: Path, version: str) -> bool:
        """Unpack assets-<version>.zip (or assets.zip) when assets/objects is missing or sparse.

        Returns:
            True if an archive was unpacked
        """
        assets_dir = client_root / ASSETS_DIR_NAME
        archive = client_root / f"assets-{version}.zip"
        if not archive.is_file():
            archive = client_root / "assets.zip"
            if not archive.is_file():
                return False

        objects_dir = assets_dir / "objects"
        if objects_dir.is_dir() and sum(1 for _ in objects_dir.iterdir()) >= ASSETS_MIN_OBJECTS:
            return False

        log.info(f"[ASSETS] Unpacking {archive.name}")
        try:
            extract_zip_safely(archive, assets_dir)
        except (ArchiveError, OSError) as e:
            log.error(f"[ASSETS] Failed to unpack {archive.name}: {e}")
            return False
        return True
