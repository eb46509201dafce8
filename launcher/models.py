#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launcher data model
Values handed in by the auth exchange, the server list and the settings store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import (
    MEMORY_DEFAULT_MB,
    WINDOW_HEIGHT_DEFAULT,
    WINDOW_WIDTH_DEFAULT,
)
from launcher.errors import ConfigurationError


class FileStatus(Enum):
    MISSING = "missing"
    MISMATCH = "mismatch"
    VALID = "valid"


@dataclass(frozen=True)
class FileEntry:
    """Expected content of one client file"""
    content_hash: str
    size: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileEntry":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"File entry must be an object, got {type(data).__name__}")
        return cls(content_hash=str(data.get("md5") or ""), size=int(data.get("size") or 0))


@dataclass(frozen=True)
class FileManifest:
    """Server-declared client tree: sub-directories by name and files by name"""
    directories: Mapping[str, "FileManifest"] = field(default_factory=dict)
    files: Mapping[str, FileEntry] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FileManifest":
        """Build a manifest from the session JSON.

        Missing or null "files"/"directories" maps are treated as empty at any depth.
        """
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Manifest node must be an object, got {type(data).__name__}")
        directories = {
            name: cls.from_dict(child)
            for name, child in (data.get("directories") or {}).items()
        }
        files = {
            name: FileEntry.from_dict(entry)
            for name, entry in (data.get("files") or {}).items()
        }
        return cls(directories=directories, files=files)


# relative posix path -> expected entry
FlatManifest = Dict[str, FileEntry]
# relative posix path -> expected hash
DownloadSet = Dict[str, str]


@dataclass(frozen=True)
class ServerProfile:
    """Target server and client build"""
    name: str
    version: str
    address: str = ""
    port: int = 0
    asset_dir: str = ""
    title: Optional[str] = None
    extra_checksum: Optional[str] = None
    optional_mods: Mapping[str, Any] = field(default_factory=dict)

    @property
    def server_id(self) -> str:
        """Folder name of the client tree (assetDir, or the server name)"""
        return self.asset_dir or self.name

    def __str__(self) -> str:
        return self.title or f"{self.name} {self.version}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerProfile":
        name = str(data.get("name") or "")
        version = str(data.get("version") or "")
        if not name or not version:
            raise ConfigurationError("Server profile needs both 'name' and 'version'")
        return cls(
            name=name,
            version=version,
            address=str(data.get("ip") or data.get("address") or ""),
            port=int(data.get("port") or 0),
            asset_dir=str(data.get("assetDir") or data.get("asset_dir") or name),
            title=data.get("title"),
            extra_checksum=data.get("extraCheckSum") or data.get("extra_checksum"),
            optional_mods=data.get("optionalMods") or data.get("optional_mods") or {},
        )


@dataclass(frozen=True)
class SessionData:
    """Result of the auth exchange"""
    player_name: str
    uuid: str
    access_token: str
    file_manifest: Optional[FileManifest] = None
    server_id: Optional[str] = None

    def __repr__(self) -> str:
        # Never render the token, even in tracebacks
        return (
            f"SessionData(player_name={self.player_name!r}, uuid={self.uuid!r}, "
            f"access_token='***', server_id={self.server_id!r})"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionData":
        return cls(
            player_name=str(data.get("playername") or ""),
            uuid=str(data.get("uuid") or ""),
            access_token=str(data.get("session") or ""),
            file_manifest=FileManifest.from_dict(data.get("client")) if data.get("client") is not None else None,
            server_id=data.get("serverId"),
        )


@dataclass(frozen=True)
class LaunchSettings:
    """Per-instance player preferences, passed in explicitly for every launch"""
    memory_mb: int = MEMORY_DEFAULT_MB
    java_path: Optional[str] = None
    jvm_args: Tuple[str, ...] = ()
    window_width: int = WINDOW_WIDTH_DEFAULT
    window_height: int = WINDOW_HEIGHT_DEFAULT
    fullscreen: bool = False
    auto_connect: bool = True
    optional_mods_state: Mapping[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LaunchSettings":
        if not data:
            return cls()
        jvm_args = data.get("jvmArgs") or ()
        if isinstance(jvm_args, str):
            jvm_args = jvm_args.split()
        return cls(
            memory_mb=int(data.get("memoryMb") or data.get("memoryMB") or 0),
            java_path=data.get("javaPath") or None,
            jvm_args=tuple(jvm_args),
            window_width=int(data.get("windowWidth") or WINDOW_WIDTH_DEFAULT),
            window_height=int(data.get("windowHeight") or WINDOW_HEIGHT_DEFAULT),
            fullscreen=bool(data.get("fullScreen", False)),
            auto_connect=bool(data.get("autoConnect", True)),
            optional_mods_state=dict(data.get("optionalModsState") or {}),
        )


@dataclass
class OptionalMod:
    """A mod the player may switch off; disabled jars are never downloaded"""
    id: str
    name: str = ""
    description: Optional[str] = None
    info_file: Optional[str] = None
    jars: List[str] = field(default_factory=list)
    excludings: List[str] = field(default_factory=list)
    enabled_by_default: bool = False


@dataclass(frozen=True)
class LaunchSpec:
    """Everything needed to assemble one client invocation"""
    session: SessionData
    target: ServerProfile
    client_root: Path
    runtime_executable: Path
    memory_mb: int
    settings: LaunchSettings = field(default_factory=LaunchSettings)
