from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    tests_dir = root / "tests"
    tests_str = str(tests_dir)
    if tests_str not in sys.path:
        sys.path.insert(1, tests_str)


_ensure_project_root_on_path()

# Dedicated loggers open their files on import; keep them out of the real data dir
os.environ.setdefault("LUMEN_DATA_DIR", tempfile.mkdtemp(prefix="lumen-tests-"))


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    target = tmp_path / "data"
    monkeypatch.setenv("LUMEN_DATA_DIR", str(target))
    return target
