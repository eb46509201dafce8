#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared HTTP session
One pooled requests.Session is reused by every download worker
"""

from __future__ import annotations

from typing import Tuple

import requests
from requests.adapters import HTTPAdapter

from config import (
    APP_USER_AGENT,
    DOWNLOAD_WORKERS_DEFAULT,
    HTTP_CONNECT_TIMEOUT_S,
    HTTP_POOL_CONNECTIONS,
    HTTP_READ_TIMEOUT_S,
)


def build_session(workers: int = DOWNLOAD_WORKERS_DEFAULT) -> requests.Session:
    """Create a session whose connection pool can serve every worker at once.

    Retries are disabled at the adapter level: a failed file is reported
    and fetched again on the next update pass.

    Args:
        workers: Number of threads that will share the session

    Returns:
        Configured requests.Session
    """
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=max(1, workers) * 2,
    )
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": APP_USER_AGENT})
    return session


def http_timeout() -> Tuple[int, int]:
    """(connect, read) timeout tuple applied to every request"""
    return (HTTP_CONNECT_TIMEOUT_S, HTTP_READ_TIMEOUT_S)
