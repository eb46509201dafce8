#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Issue Reporter

Keeps a short plain-text record of failed update and launch attempts next to
the client data, so a player can paste it into a support ticket.

Entry layout:
    Oct 17 14:02 | ERROR | DOWNLOADING_FAILED | downloading failed: ...
      stage=downloading, failed_files=3
    Fix: Check your internet connection and press Play again.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import ISSUES_FILE_KEEP_LINES, ISSUES_FILE_MAX_BYTES, ISSUES_FILE_NAME
from utils.core.paths import get_user_data_dir

_write_lock = threading.Lock()
_recent: Dict[tuple, float] = {}


def issues_path() -> Path:
    data_dir = get_user_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / ISSUES_FILE_NAME


def _shrink_if_large(path: Path) -> None:
    try:
        if path.stat().st_size <= ISSUES_FILE_MAX_BYTES:
            return
        tail = path.read_text(encoding="utf-8", errors="ignore").splitlines()[-ISSUES_FILE_KEEP_LINES:]
        path.write_text("\n".join(tail) + "\n", encoding="utf-8")
    except OSError:
        pass


def _format_entry(code: str, severity: str, message: str, details, hint, when: float) -> str:
    stamp = time.strftime("%b %d %H:%M", time.localtime(when))
    rows = [f"{stamp} | {severity.upper()} | {code} | {message}".rstrip()]
    if details:
        rows.append("  " + ", ".join(f"{key}={value}" for key, value in details.items()))
    if hint:
        rows.append(f"Fix: {hint}")
    return "\n".join(rows) + "\n"


def report_issue(
    code: str,
    severity: str,
    message: str,
    *,
    details: Optional[Dict[str, Any]] = None,
    hint: Optional[str] = None,
    dedupe_window_s: float = 3.0,
) -> None:
    """
    Append an entry to the issues file. Best effort, never raises.

    Args:
        code: Identifier such as "DOWNLOADING_FAILED"
        severity: "error", "warning" or "info"
        message: Redacted one-line summary
        details: Extra key/value pairs written on a second line
        hint: What the player can try next
        dedupe_window_s: Repeats of the same code and message inside this window are skipped
    """
    try:
        path = issues_path()
        now = time.time()
        with _write_lock:
            key = (str(path), code, message)
            if now - _recent.get(key, 0.0) < dedupe_window_s:
                return
            _recent[key] = now
            _shrink_if_large(path)
            with path.open("a", encoding="utf-8", errors="ignore") as fh:
                fh.write(_format_entry(code, severity, message, details, hint, now))
    except Exception:  # noqa: BLE001
        return
