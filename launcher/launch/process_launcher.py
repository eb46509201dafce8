#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Process Launcher
Spawns the client JVM, pipes its output into the client log and stops it on request
"""

from __future__ import annotations

import os
import subprocess
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

import psutil

from config import CLIENT_LOG_PREFIX, PROCESS_TERMINATE_TIMEOUT_S, STRIPPED_ENV_VARS
from launcher.errors import LaunchError
from launcher.launch.command_builder import build_command, format_command, redact_command
from launcher.models import LaunchSpec
from utils.core.logging import get_logger, get_named_logger, register_secret
from utils.threading.thread_manager import ThreadManager, create_daemon_thread

log = get_logger()


class LogLevel(Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


# (line, level) for every line the client prints
OutputCallback = Callable[[str, LogLevel], None]


def classify_line(line: str) -> LogLevel:
    if "ERROR" in line or "Exception" in line:
        return LogLevel.ERROR
    if "WARN" in line:
        return LogLevel.WARN
    return LogLevel.INFO


def clean_environment(base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Copy of the environment without variables that override the client JVM's options/classpath"""
    env = dict(os.environ if base is None else base)
    for name in STRIPPED_ENV_VARS:
        env.pop(name, None)
    return env


def _pipe_output(stream, on_output: Optional[OutputCallback]) -> None:
    client_log = get_named_logger("client", prefix=CLIENT_LOG_PREFIX)
    try:
        for raw in stream:
            line = raw.rstrip("\r\n")
            if not line:
                continue
            level = classify_line(line)
            if level is LogLevel.ERROR:
                client_log.error(f"[CLIENT] {line}")
            elif level is LogLevel.WARN:
                client_log.warning(f"[CLIENT] {line}")
            else:
                client_log.debug(f"[CLIENT] {line}")
            if on_output is not None:
                try:
                    on_output(line, level)
                except Exception as exc:  # noqa: BLE001
                    log.debug(f"[LAUNCH] Output callback failed: {exc}")
    except (OSError, ValueError) as exc:
        log.debug(f"[LAUNCH] Client output pipe closed: {exc}")
    finally:
        try:
            stream.close()
        except OSError:
            pass


class ProcessLauncher:
    """Starts the client and returns immediately with a live process handle"""

    def __init__(self, thread_manager: Optional[ThreadManager] = None):
        self.thread_manager = thread_manager

    def launch(
        self,
        spec: LaunchSpec,
        on_output: Optional[OutputCallback] = None,
        command: Optional[List[str]] = None,
    ) -> psutil.Popen:
        """Spawn the client rooted at spec.client_root.

        stderr is merged into stdout and read on a daemon thread.

        Args:
            spec: Launch inputs
            on_output: Receives every output line with its level
            command: Prebuilt argument list; built from spec when None

        Raises:
            LaunchError: the process could not be started
        """
        cmd = command if command is not None else build_command(spec)
        token = spec.session.access_token
        register_secret(token)
        log.info(f"[LAUNCH] Command: {format_command(redact_command(cmd, token))}")

        try:
            proc = psutil.Popen(
                cmd,
                cwd=str(spec.client_root),
                env=clean_environment(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError, psutil.Error) as exc:
            raise LaunchError(f"Could not start {spec.runtime_executable}: {exc}") from exc

        log.info(f"[LAUNCH] Client started (PID={proc.pid})")
        if proc.stdout is not None:
            reader = create_daemon_thread(_pipe_output, name=f"ClientOutput-{proc.pid}", args=(proc.stdout, on_output))
            reader.start()
            if self.thread_manager is not None:
                self.thread_manager.register(reader.name, reader)
        return proc


def terminate_process_tree(proc: psutil.Process, timeout: float = PROCESS_TERMINATE_TIMEOUT_S) -> int:
    """Terminate proc and its children, killing whatever outlives timeout.

    Returns:
        Number of processes that had to be killed
    """
    try:
        procs = proc.children(recursive=True) + [proc]
    except psutil.NoSuchProcess:
        return 0
    for p in procs:
        try:
            p.terminate()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass
    _, alive = psutil.wait_procs(procs, timeout=timeout)
    for p in alive:
        try:
            p.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            log.debug(f"[LAUNCH] Process already gone or inaccessible: {e}")
    if alive:
        log.warning(f"[LAUNCH] Force killed {len(alive)} client process(es)")
    return len(alive)
