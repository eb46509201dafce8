#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launcher package
Client update, Java runtime provisioning and game launch
"""
