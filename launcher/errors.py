#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launcher error types
Every failure the update/launch pipeline can surface derives from LauncherError
"""

from __future__ import annotations

from typing import Dict, Optional


class LauncherError(Exception):
    """Base class for update and launch failures"""


class TransportError(LauncherError):
    """Network failure, non-success HTTP status, or an empty response body"""

    def __init__(self, message: str, *, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class IntegrityError(LauncherError):
    """A local file could not be read while checking it"""


class AggregateDownloadError(LauncherError):
    """One or more files in a download batch failed

    Attributes:
        failed_count: Number of files that could not be fetched
        failures: Relative path -> short reason
    """

    def __init__(self, failed_count: int, failures: Optional[Dict[str, str]] = None):
        self.failed_count = failed_count
        self.failures = dict(failures or {})
        super().__init__(f"{failed_count} file(s) failed to download")


class ConfigurationError(LauncherError):
    """Unsupported OS/architecture/version combination or malformed input"""


class ArchiveError(LauncherError):
    """Corrupt runtime archive, unsafe entry path, or no executable inside"""


class LaunchError(LauncherError):
    """The client process could not be spawned"""


class PipelineCancelled(LauncherError):
    """The caller cancelled the update before it finished"""


class PipelineError(LauncherError):
    """Terminal failure of the update/launch pipeline

    Attributes:
        stage: PipelineStage that was running when the failure happened
        cause: Underlying exception
        failed_count: Failed file count when the cause was a download batch
    """

    def __init__(self, stage, cause: BaseException, failed_count: Optional[int] = None):
        self.stage = stage
        self.cause = cause
        if failed_count is None and isinstance(cause, AggregateDownloadError):
            failed_count = cause.failed_count
        self.failed_count = failed_count
        stage_name = getattr(stage, "value", stage)
        super().__init__(f"{stage_name} failed: {cause}")
