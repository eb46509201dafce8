#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Thread Manager
Bookkeeping for the launcher's background threads (pipeline worker, client
output readers) so they can be signalled and joined together on exit
"""

# Standard library imports
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

# Local imports
from config import THREAD_JOIN_TIMEOUT_S
from utils.core.logging import get_logger, log_action

log = get_logger()


@dataclass
class ManagedThread:
    name: str
    thread: threading.Thread
    # Signals the thread to finish; run before any join
    stop_method: Optional[Callable[[], None]] = None

    @property
    def alive(self) -> bool:
        return self.thread.is_alive()


class ThreadManager:
    """Registry of background threads with a single bounded shutdown"""

    def __init__(self):
        self.threads: List[ManagedThread] = []
        self.lock = threading.Lock()

    def register(self, name: str, thread: threading.Thread,
                 stop_method: Optional[Callable[[], None]] = None) -> None:
        with self.lock:
            self.threads = [m for m in self.threads if m.alive]
            self.threads.append(ManagedThread(name, thread, stop_method))
        log.debug(f"[THREADS] Tracking {name}")

    def _snapshot(self) -> List[ManagedThread]:
        with self.lock:
            return [m for m in self.threads if m.alive]

    def stop_all(self, timeout: float = THREAD_JOIN_TIMEOUT_S) -> Tuple[List[str], float]:
        """
        Signal every live thread, then join them within one shared deadline.

        Returns:
            (names still running afterwards, seconds spent)
        """
        started = time.monotonic()
        running = self._snapshot()
        if not running:
            return [], 0.0
        log_action(log, f"Stopping {len(running)} background thread(s)", "🧹")

        for managed in running:
            if managed.stop_method is None:
                continue
            try:
                managed.stop_method()
            except Exception as e:  # noqa: BLE001
                log.warning(f"[THREADS] Stop signal for {managed.name} failed: {e}")

        deadline = started + timeout
        for managed in running:
            managed.thread.join(max(0.0, deadline - time.monotonic()))

        leftover = [m.name for m in running if m.alive]
        if leftover:
            log.warning(f"[THREADS] Still running after {timeout}s: {', '.join(leftover)}")
        return leftover, time.monotonic() - started

    @property
    def alive_threads(self) -> List[str]:
        return [m.name for m in self._snapshot()]


def create_daemon_thread(target: Callable, name: Optional[str] = None, args: tuple = ()) -> threading.Thread:
    """Unstarted daemon thread; callers start it and may register it with a ThreadManager."""
    return threading.Thread(target=target, name=name, args=args, daemon=True)
