#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup subpackage
"""

from .arguments import setup_arguments
from .initialization import apply_data_dir, setup_logging_and_cleanup
from .inputs import load_inputs, load_json

__all__ = [
    'setup_arguments',
    'apply_data_dir',
    'setup_logging_and_cleanup',
    'load_inputs',
    'load_json',
]
