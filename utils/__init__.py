#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared helpers for the launcher

- core: data directories, logging setup and the issues file
- download: the pooled HTTP session
- threading: daemon workers and shutdown bookkeeping
"""

from utils.core.paths import (
    get_client_dir,
    get_clients_dir,
    get_logs_dir,
    get_runtimes_dir,
    get_user_data_dir,
)

__all__ = [
    'get_client_dir',
    'get_clients_dir',
    'get_logs_dir',
    'get_runtimes_dir',
    'get_user_data_dir',
]
