from __future__ import annotations

import hashlib
import io
import zipfile
from typing import Dict, Iterable, List, Optional, Tuple


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"", error: Optional[Exception] = None):
        self.status_code = status_code
        self._body = body
        self._error = error

    def iter_content(self, chunk_size: int = 1):
        if self._error is not None:
            raise self._error
        for start in range(0, len(self._body), max(1, chunk_size)):
            yield self._body[start:start + chunk_size]

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


class FakeSession:
    """Serves canned responses by URL suffix and records every requested URL."""

    def __init__(self, routes: Optional[Dict[str, FakeResponse]] = None):
        self.routes = dict(routes or {})
        self.requests: List[str] = []

    def get(self, url: str, stream: bool = False, timeout=None) -> FakeResponse:
        self.requests.append(url)
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                return response
        return FakeResponse(status_code=404)


def make_zip(entries: Iterable[Tuple[str, bytes]], modes: Optional[Dict[str, int]] = None) -> bytes:
    """Zip bytes holding entries; modes maps entry names to unix permission bits."""
    buffer = io.BytesIO()
    modes = modes or {}
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries:
            info = zipfile.ZipInfo(name)
            if name in modes:
                info.external_attr = modes[name] << 16
            archive.writestr(info, data)
    return buffer.getvalue()
