#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Classpath assembly
Scans the client's libraries for -cp and, on modular profiles, picks the jars booted with -p
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional

from config import LIBRARIES_DIR_NAME, MODS_DIR_NAME, PRIMARY_ARTIFACT_NAME
from launcher.launch.version_profiles import VersionProfile
from launcher.runtime.platform_info import HostOS, detect_os
from utils.core.logging import get_logger

log = get_logger()

BOOTSTRAP_MARKERS = ("bootstraplauncher", "launchwrapper")

_FOREIGN_NATIVES = {
    HostOS.WINDOWS: ("natives-linux", "natives-macos", "natives-osx"),
    HostOS.LINUX: ("natives-windows", "natives-macos", "natives-osx"),
    HostOS.MACOS: ("natives-windows", "natives-linux"),
}


def is_compatible_library(name: str, host_os: HostOS) -> bool:
    """False for natives jars built for another OS"""
    lowered = name.lower()
    if "natives" not in lowered:
        return True
    return not any(marker in lowered for marker in _FOREIGN_NATIVES[host_os])


def _sort_key(path: Path):
    is_bootstrap = any(marker in path.name.lower() for marker in BOOTSTRAP_MARKERS)
    return (not is_bootstrap, str(path))


def resolve_libraries_dir(client_root: Path, profile: Optional[VersionProfile] = None) -> Path:
    """libraries/, or the profile's own directory when it is populated"""
    if profile is not None and profile.libraries_dir:
        preferred = client_root / profile.libraries_dir
        if (preferred / "cpw").is_dir():
            return preferred
    return client_root / LIBRARIES_DIR_NAME


def _excluded_prefixes(profile: Optional[VersionProfile]) -> List[str]:
    if profile is None:
        return []
    names = [module.rsplit("/", 1)[-1] for module in profile.module_path]
    return [prefix.lower() for prefix in (*profile.classpath_excludes, *names)]


def _is_excluded(name: str, prefixes: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(lowered.startswith(prefix) for prefix in prefixes)


def collect_libraries(
    client_root: Path,
    host_os: Optional[HostOS] = None,
    profile: Optional[VersionProfile] = None,
) -> List[Path]:
    """Every jar under the libraries directory, class loader bootstrap jars first, then lexicographic.

    Jars for another OS, jars inside mods/ and jars the profile keeps off the
    classpath are left out.
    """
    host_os = host_os or detect_os()
    libraries_dir = resolve_libraries_dir(client_root, profile)
    if not libraries_dir.is_dir():
        return []
    mods_dir = client_root / MODS_DIR_NAME
    excluded = _excluded_prefixes(profile)
    jars = [
        p for p in libraries_dir.rglob("*.jar")
        if p.is_file()
        and mods_dir not in p.parents
        and is_compatible_library(p.name, host_os)
        and not _is_excluded(p.name, excluded)
    ]
    return sorted(jars, key=_sort_key)


def build_classpath(
    client_root: Path,
    host_os: Optional[HostOS] = None,
    profile: Optional[VersionProfile] = None,
) -> str:
    """Libraries followed by the client's primary jar, joined with os.pathsep."""
    client_root = Path(client_root).absolute()
    entries = [str(p) for p in collect_libraries(client_root, host_os, profile)]
    if not _is_excluded(PRIMARY_ARTIFACT_NAME, _excluded_prefixes(profile)):
        entries.append(str(client_root / PRIMARY_ARTIFACT_NAME))
    return os.pathsep.join(entries)


def build_module_path(client_root: Path, profile: VersionProfile) -> List[Path]:
    """Module path jars of a modular profile that exist on disk; missing ones are logged."""
    libraries_dir = resolve_libraries_dir(Path(client_root).absolute(), profile)
    found = []
    for module in profile.module_path:
        jar = libraries_dir / module
        if jar.is_file():
            found.append(jar)
        else:
            log.warning(f"[LAUNCH] Module missing: {jar}")
    if profile.module_path and not found:
        log.error(f"[LAUNCH] No module path jars found in {libraries_dir}")
    return found
