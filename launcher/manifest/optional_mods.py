#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Optional Mods
Parses the optional mod descriptors of a server profile and decides which
files the player switched off
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Set

from config import MODS_DIR_NAME
from launcher.models import OptionalMod, ServerProfile
from utils.core.logging import get_logger

log = get_logger()


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def parse_optional_mods(profile: ServerProfile) -> List[OptionalMod]:
    """Build OptionalMod objects from profile.optional_mods.

    Missing ids default to the mapping key and missing jar lists to
    "<id>.jar". Malformed descriptors are logged and skipped.
    """
    mods: List[OptionalMod] = []
    for mod_id, raw in (profile.optional_mods or {}).items():
        if not isinstance(raw, Mapping):
            log.warning(f"[MODS] Skipping optional mod '{mod_id}': descriptor is not an object")
            continue
        ident = str(raw.get("id") or mod_id)
        selected = raw.get("selected")
        if selected is None:
            selected = raw.get("default", False)
        mods.append(
            OptionalMod(
                id=ident,
                name=str(raw.get("name") or ident),
                description=raw.get("description"),
                info_file=raw.get("infoFile"),
                jars=_as_list(raw.get("jars")) or [f"{ident}.jar"],
                excludings=_as_list(raw.get("excludings")),
                enabled_by_default=bool(selected),
            )
        )
    return mods


def compute_ignored_files(mods: List[OptionalMod], state: Mapping[str, bool]) -> Set[str]:
    """Collect jar names and info files of every disabled mod.

    Args:
        mods: Parsed optional mods
        state: Player choices by mod id; absent ids fall back to the mod default
    """
    ignored: Set[str] = set()
    for mod in mods:
        enabled = state.get(mod.id, mod.enabled_by_default)
        if enabled:
            continue
        ignored.update(mod.jars)
        if mod.info_file:
            ignored.add(mod.info_file)
    return ignored


def remove_disabled_mods(client_root: Path, ignored: Set[str]) -> int:
    """Delete files under mods/ whose name matches a disabled mod.

    Returns:
        Number of files removed
    """
    mods_dir = client_root / MODS_DIR_NAME
    if not ignored or not mods_dir.is_dir():
        return 0

    removed = 0
    for path in mods_dir.rglob("*"):
        if not path.is_file() or path.name not in ignored:
            continue
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            log.warning(f"[MODS] Could not remove disabled mod {path.name}: {e}")
    if removed:
        log.info(f"[MODS] Removed {removed} disabled mod file(s)")
    return removed
