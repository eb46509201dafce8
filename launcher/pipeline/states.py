#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipeline stages and progress events
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class PipelineStage(Enum):
    INIT = "init"
    VERIFYING = "verifying"
    DOWNLOADING = "downloading"
    PROVISIONING_RUNTIME = "provisioning_runtime"
    LAUNCHING = "launching"
    LAUNCHED = "launched"
    FAILED = "failed"

    @property
    def order(self) -> int:
        return _ORDER[self]

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.LAUNCHED, PipelineStage.FAILED)


_ORDER = {stage: index for index, stage in enumerate(PipelineStage)}


@dataclass(frozen=True)
class ProgressEvent:
    """One status update; fraction None means indeterminate"""
    stage: PipelineStage
    message: str
    fraction: Optional[float] = None


ProgressCallback = Callable[[ProgressEvent], None]
