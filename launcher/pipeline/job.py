#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipeline Job
Runs an UpdateLaunchPipeline on a background thread with progress and cancellation hooks
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import psutil

from launcher.errors import PipelineError
from launcher.models import LaunchSettings, ServerProfile, SessionData
from launcher.pipeline.states import ProgressCallback, ProgressEvent
from launcher.pipeline.update_sequence import UpdateLaunchPipeline
from utils.core.logging import get_logger
from utils.threading.thread_manager import ThreadManager, create_daemon_thread

log = get_logger()

# Hands a zero-argument callable to the caller's thread of choice (e.g. a UI event loop)
Dispatcher = Callable[[Callable[[], None]], None]


def _call_directly(fn: Callable[[], None]) -> None:
    fn()


class PipelineJob:
    """One cancellable update/launch attempt running off the caller's thread"""

    def __init__(
        self,
        pipeline: UpdateLaunchPipeline,
        session: SessionData,
        target: ServerProfile,
        settings: Optional[LaunchSettings] = None,
        on_progress: Optional[ProgressCallback] = None,
        dispatcher: Optional[Dispatcher] = None,
        thread_manager: Optional[ThreadManager] = None,
        **run_kwargs,
    ):
        self.pipeline = pipeline
        self.session = session
        self.target = target
        self.settings = settings
        self.on_progress = on_progress
        self.dispatcher = dispatcher or _call_directly
        self.thread_manager = thread_manager
        self.run_kwargs = run_kwargs
        self.cancel_event = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.result: Optional[psutil.Popen] = None
        self.error: Optional[PipelineError] = None

    def _post(self, event: ProgressEvent) -> None:
        if self.on_progress is None:
            return
        callback = self.on_progress
        self.dispatcher(lambda: callback(event))

    def _worker(self) -> None:
        try:
            self.result = self.pipeline.run(
                self.session,
                self.target,
                self.settings,
                progress_callback=self._post,
                cancel_event=self.cancel_event,
                **self.run_kwargs,
            )
        except PipelineError as exc:
            self.error = exc
        except Exception as exc:  # noqa: BLE001
            log.exception(f"[PIPELINE] Unexpected error: {exc}")
            self.error = PipelineError(self.pipeline.stage, exc)
        finally:
            self._done.set()

    def start(self) -> "PipelineJob":
        if self._thread is not None:
            raise RuntimeError("Job already started")
        self._thread = create_daemon_thread(self._worker, name="UpdatePipeline")
        self._thread.start()
        if self.thread_manager is not None:
            self.thread_manager.register("UpdatePipeline", self._thread, stop_method=self.cancel)
        return self

    def cancel(self) -> None:
        """Ask the worker to stop; files in flight finish or are discarded"""
        self.cancel_event.set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait_done(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def wait(self, timeout: Optional[float] = None) -> psutil.Popen:
        """Block until the pipeline finishes.

        Raises:
            PipelineError: the pipeline failed or was cancelled
            TimeoutError: timeout elapsed first
        """
        if not self._done.wait(timeout):
            raise TimeoutError("Update pipeline still running")
        if self.error is not None:
            raise self.error
        return self.result
