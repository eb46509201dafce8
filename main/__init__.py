#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Main entry point for Lumen
"""

import sys
from typing import Optional, Sequence

# Python version check
MIN_PYTHON = (3, 9)
if sys.version_info < MIN_PYTHON:
    raise RuntimeError(
        f"Lumen requires Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]} or newer. "
        "Please upgrade your interpreter."
    )

from .setup.arguments import setup_arguments
from .setup.initialization import apply_data_dir, setup_logging_and_cleanup

PROGRESS_STEP = 0.1
JOB_POLL_INTERVAL_S = 0.5


class ConsoleProgress:
    """Logs stage changes and download progress in coarse steps"""

    def __init__(self, logger):
        self.log = logger
        self._stage = None
        self._next_fraction = 0.0

    def __call__(self, event) -> None:
        if event.stage is not self._stage:
            self._stage = event.stage
            self._next_fraction = 0.0
            return
        if event.fraction is None or event.fraction < self._next_fraction:
            return
        self.log.info(f"[{event.stage.value.upper()}] {event.message} ({event.fraction:.0%})")
        while self._next_fraction <= event.fraction:
            self._next_fraction += PROGRESS_STEP


def run_launcher(args) -> int:
    """Update and start the client described by the parsed arguments; returns the exit code."""
    # Imported here so dedicated log files land in the configured data directory
    from launcher.download.file_downloader import FileDownloader
    from launcher.errors import ConfigurationError, PipelineError
    from launcher.launch.process_launcher import ProcessLauncher, terminate_process_tree
    from launcher.pipeline import PipelineJob, UpdateLaunchPipeline
    from utils.core.issue_reporter import report_issue
    from utils.core.logging import get_logger, log_success
    from utils.threading.thread_manager import ThreadManager
    from .setup.inputs import load_inputs

    log = get_logger()

    try:
        session, target, settings = load_inputs(args.session, args.server, args.settings)
    except ConfigurationError as e:
        log.error(f"❌ {e}")
        report_issue("INVALID_INPUT", "error", str(e), hint="Check the JSON files passed on the command line.")
        return 1

    thread_manager = ThreadManager()
    pipeline = UpdateLaunchPipeline(
        downloader=FileDownloader(workers=args.workers),
        launcher=ProcessLauncher(thread_manager),
    )
    job = PipelineJob(
        pipeline,
        session,
        target,
        settings,
        on_progress=ConsoleProgress(log),
        thread_manager=thread_manager,
    ).start()

    try:
        try:
            while not job.done:
                job.wait_done(JOB_POLL_INTERVAL_S)
        except KeyboardInterrupt:
            log.warning("Interrupted - cancelling update")
            job.cancel()
        proc = job.wait()
    except PipelineError as e:
        log.error(f"❌ {e}")
        return 1

    if not args.wait:
        return 0

    log.info(f"Waiting for the client to exit (PID={proc.pid})")
    try:
        code = proc.wait()
    except KeyboardInterrupt:
        log.warning("Interrupted - stopping the client")
        terminate_process_tree(proc)
        code = 1
    finally:
        thread_manager.stop_all()
    log_success(log, f"Client exited with code {code}", "👋")
    return code or 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Program entry point that prepares logging and runs the launcher."""
    args = setup_arguments(argv)
    apply_data_dir(args)
    setup_logging_and_cleanup(args)
    return run_launcher(args)
