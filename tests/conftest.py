# tests/conftest.py
import importlib
import shutil
import sys
import threading
import uuid
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_fs(tmp_path: Path, monkeypatch):
    """Prevent tests from picking up a real config.yaml or .env."""
    monkeypatch.chdir(tmp_path)
    yield
    # cleanup
    shutil.rmtree(tmp_path, ignore_errors=True)


class Counter:
    """Thread-safe call counter for factories."""

    def __init__(self):
        self._lock = threading.Lock()
        self.count = 0

    def increment(self) -> int:
        with self._lock:
            self.count += 1
            return self.count


@pytest.fixture
def counter() -> Counter:
    return Counter()


@pytest.fixture
def counting_factory(counter: Counter):
    """Factory returning a fresh object and counting constructions."""

    def factory(*args, **kwargs):
        counter.increment()
        return object()

    return factory


@pytest.fixture
def holder_modules(tmp_path: Path, monkeypatch):
    """
    Write throw-away modules under tmp_path and make them importable.

    Returns a function ``write(source) -> module_name``; every module written
    is removed from sys.modules afterwards.
    """
    written = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def write(source: str, prefix: str = "holder") -> str:
        name = f"{prefix}_{uuid.uuid4().hex}"
        (tmp_path / f"{name}.py").write_text(source, encoding="utf-8")
        importlib.invalidate_caches()
        written.append(name)
        return name

    yield write
    for name in written:
        sys.modules.pop(name, None)
