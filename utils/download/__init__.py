#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Download Utilities

This subpackage contains network helpers shared by the updater:
- http_session: pooled requests session with the launcher User-Agent
"""

from utils.download.http_session import build_session, http_timeout

__all__ = [
    'build_session',
    'http_timeout',
]
