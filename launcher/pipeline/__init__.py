#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Update/launch pipeline
"""

from .job import PipelineJob
from .states import PipelineStage, ProgressEvent
from .update_sequence import UpdateLaunchPipeline

__all__ = ['PipelineJob', 'PipelineStage', 'ProgressEvent', 'UpdateLaunchPipeline']
