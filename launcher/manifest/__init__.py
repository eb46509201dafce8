#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Manifest handling
Flattening, client path normalization and optional mod filtering
"""

from .flattener import (
    ClientFiles,
    check_relative_path,
    flatten,
    flatten_for_client,
    normalize_client_path,
    resolve_client_file,
)
from .optional_mods import compute_ignored_files, parse_optional_mods, remove_disabled_mods

__all__ = [
    'ClientFiles',
    'check_relative_path',
    'flatten',
    'flatten_for_client',
    'normalize_client_path',
    'resolve_client_file',
    'compute_ignored_files',
    'parse_optional_mods',
    'remove_disabled_mods',
]
