#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Host platform detection for runtime selection
"""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from launcher.errors import ConfigurationError


class HostOS(Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"


class HostArch(Enum):
    X64 = "x64"
    X86 = "x86"
    ARM64 = "arm64"


@dataclass(frozen=True)
class RuntimeDescriptor:
    """Java major version plus host platform; doubles as the cache folder name"""
    major_version: int
    os: HostOS
    arch: HostArch

    @property
    def cache_key(self) -> str:
        return f"java-{self.major_version}-{self.os.value}-{self.arch.value}"

    @property
    def lookup_key(self):
        return (self.major_version, self.os, self.arch)


def detect_os(system: Optional[str] = None) -> HostOS:
    name = (system if system is not None else sys.platform).lower()
    if name.startswith("win"):
        return HostOS.WINDOWS
    if name.startswith("darwin") or name.startswith("mac"):
        return HostOS.MACOS
    if name.startswith("linux"):
        return HostOS.LINUX
    raise ConfigurationError(f"Unsupported operating system: {name}")


def detect_arch(machine: Optional[str] = None) -> HostArch:
    name = (machine if machine is not None else platform.machine()).lower()
    if name in ("aarch64", "arm64", "armv8", "armv8l"):
        return HostArch.ARM64
    if name in ("x86_64", "amd64", "x64"):
        return HostArch.X64
    if name in ("i386", "i486", "i586", "i686", "x86"):
        return HostArch.X86
    if "64" in name:
        return HostArch.X64
    if "86" in name or "32" in name:
        return HostArch.X86
    raise ConfigurationError(f"Unsupported CPU architecture: {name}")
