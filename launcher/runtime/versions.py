#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Client version -> required Java major version
"""

from __future__ import annotations

from typing import Tuple

from config import JAVA_DEFAULT_MAJOR_VERSION

# (client version prefix, java major); the longest matching prefix wins
JAVA_VERSION_RULES: Tuple[Tuple[str, int], ...] = (
    ("1.21", 21),
    ("1.20.5", 21),
    ("1.20.6", 21),
    ("1.20", 17),
    ("1.19", 17),
    ("1.18", 17),
    ("1.17", 17),
)


def _matches(version: str, prefix: str) -> bool:
    # "1.2" must not claim "1.20"
    return version == prefix or version.startswith(prefix + ".") or version.startswith(prefix + "-")


def resolve_major_version(client_version: str) -> int:
    version = (client_version or "").strip()
    best_len = -1
    major = JAVA_DEFAULT_MAJOR_VERSION
    for prefix, rule_major in JAVA_VERSION_RULES:
        if _matches(version, prefix) and len(prefix) > best_len:
            best_len = len(prefix)
            major = rule_major
    return major
