#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Allows `python -m main`
"""

import sys

from main import main

if __name__ == "__main__":
    sys.exit(main())
