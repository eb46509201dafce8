#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Runtime download catalog
BellSoft Liberica JDK builds by (major version, OS, architecture)
"""

from __future__ import annotations

from typing import Dict, Tuple

from launcher.errors import ConfigurationError
from launcher.runtime.platform_info import HostArch, HostOS, RuntimeDescriptor

_BELLSOFT = "https://download.bell-sw.com/java"
_JDK8 = f"{_BELLSOFT}/8u472+9/bellsoft-jdk8u472+9-"
_JDK17 = f"{_BELLSOFT}/17.0.17+15/bellsoft-jdk17.0.17+15-"
_JDK21 = f"{_BELLSOFT}/21.0.9+15/bellsoft-jdk21.0.9+15-"

RUNTIME_DOWNLOADS: Dict[Tuple[int, HostOS, HostArch], str] = {
    (8, HostOS.WINDOWS, HostArch.X64): _JDK8 + "windows-amd64-full.zip",
    (8, HostOS.WINDOWS, HostArch.X86): _JDK8 + "windows-i586.zip",
    (8, HostOS.LINUX, HostArch.X64): _JDK8 + "linux-amd64-full.tar.gz",
    (8, HostOS.MACOS, HostArch.X64): _JDK8 + "macos-amd64-full.tar.gz",
    (8, HostOS.MACOS, HostArch.ARM64): _JDK8 + "macos-aarch64.tar.gz",

    (17, HostOS.WINDOWS, HostArch.X64): _JDK17 + "windows-amd64-full.zip",
    (17, HostOS.WINDOWS, HostArch.X86): _JDK17 + "windows-i586-full.zip",
    (17, HostOS.LINUX, HostArch.X64): _JDK17 + "linux-amd64-full.tar.gz",
    (17, HostOS.MACOS, HostArch.X64): _JDK17 + "macos-amd64-full.tar.gz",
    (17, HostOS.MACOS, HostArch.ARM64): _JDK17 + "macos-aarch64-full.tar.gz",

    (21, HostOS.WINDOWS, HostArch.X64): _JDK21 + "windows-amd64-full.zip",
    (21, HostOS.LINUX, HostArch.X64): _JDK21 + "linux-amd64-full.tar.gz",
    (21, HostOS.MACOS, HostArch.X64): _JDK21 + "macos-amd64-full.tar.gz",
    (21, HostOS.MACOS, HostArch.ARM64): _JDK21 + "macos-aarch64-full.tar.gz",
}


def get_download_url(descriptor: RuntimeDescriptor) -> str:
    """
    Raises:
        ConfigurationError: no build is published for this platform
    """
    url = RUNTIME_DOWNLOADS.get(descriptor.lookup_key)
    if url is None:
        raise ConfigurationError(
            f"No Java {descriptor.major_version} build for "
            f"{descriptor.os.value}/{descriptor.arch.value}"
        )
    return url
