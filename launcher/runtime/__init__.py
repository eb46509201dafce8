#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Java runtime provisioning
Version rules, download catalog, safe archive extraction and the cache
"""

from .archive import extract_archive, extract_tar_safely, extract_zip_safely, find_executable, make_executable
from .catalog import RUNTIME_DOWNLOADS, get_download_url
from .platform_info import HostArch, HostOS, RuntimeDescriptor, detect_arch, detect_os
from .provisioner import RuntimeProvisioner
from .versions import resolve_major_version

__all__ = [
    'extract_archive',
    'extract_tar_safely',
    'extract_zip_safely',
    'find_executable',
    'make_executable',
    'RUNTIME_DOWNLOADS',
    'get_download_url',
    'HostArch',
    'HostOS',
    'RuntimeDescriptor',
    'detect_arch',
    'detect_os',
    'RuntimeProvisioner',
    'resolve_major_version',
]
