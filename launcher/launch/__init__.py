#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Client launch: version profiles, classpath, natives, command assembly and spawning
"""

from .classpath import build_classpath, build_module_path, collect_libraries, resolve_libraries_dir
from .command_builder import build_command, build_launch_spec, redact_command, resolve_memory
from .natives import NativesPreparer
from .process_launcher import LogLevel, ProcessLauncher, classify_line, clean_environment, terminate_process_tree
from .version_profiles import VERSION_PROFILES, VersionProfile, get_version_profile

__all__ = [
    'build_classpath',
    'build_module_path',
    'collect_libraries',
    'resolve_libraries_dir',
    'build_command',
    'build_launch_spec',
    'redact_command',
    'resolve_memory',
    'NativesPreparer',
    'LogLevel',
    'ProcessLauncher',
    'classify_line',
    'clean_environment',
    'terminate_process_tree',
    'VERSION_PROFILES',
    'VersionProfile',
    'get_version_profile',
]
