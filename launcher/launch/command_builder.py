#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launch Command Builder
Turns a LaunchSpec into the argument list of the client JVM
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence

from config import (
    APP_VERSION,
    ASSETS_DIR_NAME,
    AUTH_HOST_BASE_URL,
    BASE_JVM_ARGS,
    LAUNCH_BRAND_NAME,
    MEMORY_DEFAULT_MB,
    MEMORY_FLOOR_MB,
    MEMORY_INITIAL_HEAP_MB,
    MEMORY_MIN_ACCEPTED_MB,
    REDACTED_PLACEHOLDER,
)
from launcher.launch.classpath import build_classpath, build_module_path, resolve_libraries_dir
from launcher.launch.version_profiles import VersionProfile, get_version_profile
from launcher.models import LaunchSettings, LaunchSpec, ServerProfile, SessionData
from launcher.runtime.platform_info import HostOS, detect_os


def resolve_memory(requested_mb: Optional[int]) -> int:
    """Profile value, or the default when unset; implausibly small values become the floor."""
    memory = requested_mb if requested_mb and requested_mb > 0 else MEMORY_DEFAULT_MB
    if memory < MEMORY_MIN_ACCEPTED_MB:
        memory = MEMORY_FLOOR_MB
    return memory


def build_launch_spec(
    session: SessionData,
    target: ServerProfile,
    client_root: Path,
    runtime_executable: Path,
    settings: Optional[LaunchSettings] = None,
) -> LaunchSpec:
    settings = settings or LaunchSettings()
    return LaunchSpec(
        session=session,
        target=target,
        client_root=Path(client_root).absolute(),
        runtime_executable=Path(runtime_executable),
        memory_mb=resolve_memory(settings.memory_mb),
        settings=settings,
    )


def build_game_args(spec: LaunchSpec, asset_index: str) -> List[str]:
    session = spec.session
    root = spec.client_root
    args = [
        "--username", session.player_name,
        "--uuid", session.uuid,
        "--accessToken", session.access_token,
        "--userType", "mojang",
        "--userProperties", "{}",
        "--version", f"Forge {spec.target.version}",
        "--gameDir", str(root),
        "--assetsDir", str(root / ASSETS_DIR_NAME),
        "--assetIndex", asset_index,
    ]
    if spec.settings.fullscreen:
        args.append("--fullscreen")
    else:
        args += ["--width", str(spec.settings.window_width), "--height", str(spec.settings.window_height)]
    if spec.settings.auto_connect and spec.target.address:
        args += ["--server", spec.target.address]
        if spec.target.port:
            args += ["--port", str(spec.target.port)]
    return args


def build_command(
    spec: LaunchSpec,
    host_os: Optional[HostOS] = None,
    classpath: Optional[str] = None,
) -> List[str]:
    """Assemble the full client invocation.

    Args:
        spec: Launch inputs
        host_os: Override for the detected OS
        classpath: Precomputed classpath; scanned from the libraries directory when None

    Returns:
        Argument list, executable first

    Raises:
        ConfigurationError: the client version has no launch profile
    """
    host_os = host_os or detect_os()
    root = spec.client_root
    profile = get_version_profile(spec.target.version)
    natives_dir = root / profile.natives_dir
    if classpath is None:
        classpath = build_classpath(root, host_os, profile)

    cmd = [
        str(spec.runtime_executable),
        f"-Xmx{spec.memory_mb}M",
        f"-Xms{MEMORY_INITIAL_HEAP_MB}M",
    ]
    cmd += list(BASE_JVM_ARGS)
    cmd += list(profile.jvm_args)
    cmd += [arg for arg in spec.settings.jvm_args if arg]
    if host_os is HostOS.MACOS:
        cmd.append("-XstartOnFirstThread")
    cmd.append("-noverify")
    cmd += [f"-Dminecraft.api.{service}.host={AUTH_HOST_BASE_URL}" for service in ("auth", "account", "session")]
    cmd += [
        f"-Dminecraft.launcher.brand={LAUNCH_BRAND_NAME}",
        f"-Dminecraft.launcher.version={APP_VERSION}",
        f"-Djava.library.path={natives_dir}",
    ]
    if profile.is_modular:
        cmd += build_module_args(root, profile)
    cmd += [
        "-cp", classpath,
        profile.main_class,
    ]
    cmd += list(profile.program_args)
    cmd += build_game_args(spec, profile.asset_index)
    cmd += list(profile.extra_game_args)
    if profile.tweak_class:
        cmd += ["--tweakClass", profile.tweak_class]
    return cmd


def build_module_args(client_root: Path, profile: VersionProfile) -> List[str]:
    """System properties and the -p module path for a module-layer (NeoForge) launch"""
    natives_dir = client_root / profile.natives_dir
    args = [
        f"-Djna.tmpdir={natives_dir}",
        f"-Dorg.lwjgl.system.SharedLibraryExtractPath={natives_dir}",
        f"-Dio.netty.native.workdir={natives_dir}",
        f"-DlibraryDirectory={resolve_libraries_dir(client_root, profile)}",
    ]
    if profile.ignore_list:
        args.append(f"-DignoreList={','.join(profile.ignore_list)}")
    if profile.merge_modules:
        args.append(f"-DmergeModules={','.join(profile.merge_modules)}")
    modules = build_module_path(client_root, profile)
    if modules:
        args += ["-p", os.pathsep.join(str(jar) for jar in modules)]
    return args


def redact_command(cmd: Sequence[str], token: Optional[str]) -> List[str]:
    """Copy of cmd with the --accessToken value replaced by the placeholder.

    Other arguments are left as they are. Only a command without an
    --accessToken flag falls back to masking token wherever it appears.
    """
    redacted = list(cmd)
    flagged = False
    for index in range(1, len(redacted)):
        if redacted[index - 1] == "--accessToken":
            redacted[index] = REDACTED_PLACEHOLDER
            flagged = True
    if token and not flagged:
        redacted = [arg.replace(token, REDACTED_PLACEHOLDER) for arg in redacted]
    return redacted


def format_command(cmd: Sequence[str]) -> str:
    return " ".join(f'"{arg}"' if " " in arg else arg for arg in cmd)
