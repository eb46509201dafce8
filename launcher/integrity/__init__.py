#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Integrity checking for installed client files
"""

from .verifier import IntegrityVerifier, calculate_hash, hashes_match

__all__ = ['IntegrityVerifier', 'calculate_hash', 'hashes_match']
