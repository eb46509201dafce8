#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Client file downloads
"""

from .extra_archive import apply_extra_archive, find_extra_archive
from .file_downloader import DownloadOutcome, DownloadProgress, FileDownloader, build_file_url, format_speed

__all__ = [
    'apply_extra_archive',
    'find_extra_archive',
    'DownloadOutcome',
    'DownloadProgress',
    'FileDownloader',
    'build_file_url',
    'format_speed',
]
