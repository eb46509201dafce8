#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Path utilities for Lumen
Handles the user data directory and the client/runtime/log folders below it
"""

import os
from pathlib import Path, PureWindowsPath

from config import APP_NAME, DATA_DIR_ENV_VAR, RUNTIMES_DIR_NAME


def get_user_data_dir() -> Path:
    """
    Get the user data directory where the launcher keeps clients, runtimes and logs.
    The LUMEN_DATA_DIR environment variable takes precedence over platform defaults.
    """
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        return Path(override)

    if os.name == "nt":  # Windows
        localappdata = os.environ.get("LOCALAPPDATA")
        if localappdata:
            return Path(localappdata) / APP_NAME
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile) / "AppData" / "Local" / APP_NAME
        return Path.cwd() / APP_NAME
    else:  # Linux/macOS
        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / APP_NAME
        return Path.home() / ".local" / "share" / APP_NAME


def get_clients_dir() -> Path:
    """
    Get the directory holding one installed client tree per server.
    Creates the directory if it doesn't exist.
    """
    clients_dir = get_user_data_dir() / "clients"
    clients_dir.mkdir(parents=True, exist_ok=True)
    return clients_dir


def get_client_dir(server_id: str) -> Path:
    """Get (and create) the client root for a server id.

    Raises:
        ValueError: server_id is not a single folder name
    """
    if (
        not server_id
        or server_id in (".", "..")
        or "/" in server_id
        or "\\" in server_id
        or PureWindowsPath(server_id).drive
    ):
        raise ValueError(f"Invalid client folder name: {server_id!r}")
    client_dir = get_clients_dir() / server_id
    client_dir.mkdir(parents=True, exist_ok=True)
    return client_dir


def get_runtimes_dir() -> Path:
    """
    Get the directory where provisioned Java runtimes are cached.
    Creates the directory if it doesn't exist.
    """
    runtimes_dir = get_user_data_dir() / RUNTIMES_DIR_NAME
    runtimes_dir.mkdir(parents=True, exist_ok=True)
    return runtimes_dir


def get_logs_dir() -> Path:
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir

