#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Manifest Flattener
Turns the nested client manifest into a relative path -> entry mapping
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import AbstractSet, Dict, Optional

from config import CLIENT_ROOT_DIRS
from launcher.errors import ConfigurationError
from launcher.models import FileManifest, FlatManifest
from utils.core.logging import get_logger

log = get_logger()


def flatten(manifest: Optional[FileManifest]) -> FlatManifest:
    """Walk the manifest depth-first and join names with '/'.

    A missing manifest yields an empty mapping.
    """
    result: FlatManifest = {}
    if manifest is None:
        return result

    stack = [("", manifest)]
    while stack:
        prefix, node = stack.pop()
        for name, entry in (node.files or {}).items():
            result[prefix + name] = entry
        for name, child in (node.directories or {}).items():
            stack.append((f"{prefix}{name}/", child))
    return result


def normalize_client_path(raw_path: str) -> str:
    """Strip the build-name directory some manifests put in front of every path.

    "Industrial/mods/a.jar" -> "mods/a.jar", while "mods/a.jar" and single
    segment paths are returned unchanged.
    """
    path = raw_path.replace("\\", "/").lstrip("/")
    head, sep, rest = path.partition("/")
    if not sep:
        return path
    if any(head.startswith(root) for root in CLIENT_ROOT_DIRS):
        return path
    return rest


def check_relative_path(path: str) -> str:
    """Return path unchanged if it names a file strictly below the client root.

    Raises:
        ConfigurationError: the path is empty, absolute, drive-qualified or
            has an empty, "." or ".." segment
    """
    if not path or path.startswith("/") or PureWindowsPath(path).drive:
        raise ConfigurationError(f"Manifest path is not relative: {path!r}")
    if any(part in ("", ".", "..") for part in path.split("/")):
        raise ConfigurationError(f"Manifest path leaves the client root: {path!r}")
    return path


def resolve_client_file(client_root: Path, path: str) -> Path:
    """Join a manifest path onto the client root, refusing anything that lands outside it"""
    root = Path(client_root).resolve()
    destination = (root / PurePosixPath(check_relative_path(path))).resolve()
    if destination == root or root not in destination.parents:
        raise ConfigurationError(f"Manifest path leaves the client root: {path!r}")
    return destination


def is_ignored(path: str, ignored: AbstractSet[str]) -> bool:
    return any(path == name or path.endswith("/" + name) for name in ignored)


@dataclass(frozen=True)
class ClientFiles:
    """Manifest entries keyed by client-root path, plus the server path each came from"""
    entries: FlatManifest = field(default_factory=dict)
    remote_paths: Dict[str, str] = field(default_factory=dict)

    def remote_path(self, local_path: str) -> str:
        return self.remote_paths.get(local_path, local_path)


def flatten_for_client(
    manifest: Optional[FileManifest],
    ignored: AbstractSet[str] = frozenset(),
) -> ClientFiles:
    """Flatten, normalize keys to client-root paths and drop ignored files.

    Args:
        manifest: Manifest from the session
        ignored: File names (or relative paths) of disabled optional mods

    Entries whose path would leave the client root are logged and skipped.

    Returns:
        ClientFiles keyed by paths relative to the client root
    """
    entries: FlatManifest = {}
    remote_paths: Dict[str, str] = {}
    for raw_path, entry in flatten(manifest).items():
        path = normalize_client_path(raw_path)
        try:
            check_relative_path(path)
        except ConfigurationError as e:
            log.warning(f"[MANIFEST] Skipping entry: {e}")
            continue
        if ignored and is_ignored(path, ignored):
            continue
        entries[path] = entry
        if path != raw_path:
            remote_paths[path] = raw_path
    return ClientFiles(entries=entries, remote_paths=remote_paths)
