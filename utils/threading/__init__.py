#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Background workers: daemon thread creation and bounded shutdown via ThreadManager
"""

from utils.threading.thread_manager import ManagedThread, ThreadManager, create_daemon_thread

__all__ = [
    'ManagedThread',
    'ThreadManager',
    'create_daemon_thread',
]
