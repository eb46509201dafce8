#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Initialization setup (data directory and logging)
"""

import argparse
import os

from config import APP_VERSION, DATA_DIR_ENV_VAR
from utils.core.logging import cleanup_logs, get_logger, log_section, setup_logging

log = get_logger()


def apply_data_dir(args: argparse.Namespace) -> None:
    """Point every data path at --data-dir before anything touches disk"""
    if args.data_dir:
        os.environ[DATA_DIR_ENV_VAR] = os.path.abspath(args.data_dir)


def setup_logging_and_cleanup(args: argparse.Namespace) -> str:
    """Setup logging and clean up old log files; returns the log mode"""
    cleanup_logs()

    # Determine log mode based on flags
    if args.debug:
        log_mode = 'debug'
    elif args.verbose:
        log_mode = 'verbose'
    else:
        log_mode = 'customer'

    setup_logging(log_mode)

    if log_mode != 'customer':
        log_section(log, f"Lumen {APP_VERSION} Starting", "🚀", {
            "Verbose Mode": "Enabled" if args.verbose else "Disabled",
            "Download Workers": args.workers,
            "Wait For Client": "Yes" if args.wait else "No",
        })
    return log_mode
