#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Launch inputs
Loads the session, server and settings JSON documents handed to the CLI
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from launcher.errors import ConfigurationError
from launcher.models import LaunchSettings, ServerProfile, SessionData


def load_json(path: str) -> Dict[str, Any]:
    """Read one JSON object from path.

    Raises:
        ConfigurationError: the file is unreadable, not JSON, or not an object
    """
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return data


def load_inputs(
    session_path: str,
    server_path: str,
    settings_path: Optional[str] = None,
) -> Tuple[SessionData, ServerProfile, LaunchSettings]:
    session = SessionData.from_dict(load_json(session_path))
    target = ServerProfile.from_dict(load_json(server_path))
    settings = LaunchSettings.from_dict(load_json(settings_path)) if settings_path else LaunchSettings()
    if session.file_manifest is None:
        raise ConfigurationError(f"{session_path} has no 'client' file manifest")
    return session, target, settings
