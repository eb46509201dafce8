#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line argument parsing
"""

import argparse
from typing import Optional, Sequence

from config import (
    APP_NAME,
    DEFAULT_VERBOSE,
    DEFAULT_WAIT_FOR_CLIENT,
    DOWNLOAD_WORKERS_DEFAULT,
)


def setup_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and return command line arguments"""
    ap = argparse.ArgumentParser(
        prog="lumen",
        description=f"{APP_NAME} - update and launch a game client"
    )

    # Launch inputs
    ap.add_argument("--session", type=str, required=True,
                   help="JSON file with the auth exchange result (playername, uuid, session, client)")
    ap.add_argument("--server", type=str, required=True,
                   help="JSON file describing the target server (name, version, ip, port, ...)")
    ap.add_argument("--settings", type=str, default=None,
                   help="JSON file with per-instance settings (memoryMb, javaPath, ...)")

    # General arguments
    ap.add_argument("--verbose", action="store_true", default=DEFAULT_VERBOSE,
                   help="Enable verbose logging (developer mode - shows all technical details)")
    ap.add_argument("--debug", action="store_true", default=False,
                   help="Enable ultra-detailed debug logging")
    ap.add_argument("--data-dir", type=str, default=None,
                   help="Override the data directory (clients, runtimes, logs)")

    # Update arguments
    ap.add_argument("--workers", type=int, default=DOWNLOAD_WORKERS_DEFAULT,
                   help="Number of parallel download workers")
    ap.add_argument("--no-wait", action="store_false", dest="wait", default=DEFAULT_WAIT_FOR_CLIENT,
                   help="Exit once the client has started instead of waiting for it to close")

    return ap.parse_args(argv)
