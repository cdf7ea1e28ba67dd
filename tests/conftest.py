"""
Pytest configuration.

The project uses a ``src/`` layout (package code lives in ``src/lexibayes``).
Tests normally run after ``pip install -e .``; this file adds ``src/`` to
``sys.path`` only when the package cannot be imported normally.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    try:
        import lexibayes  # noqa: F401
        return
    except ModuleNotFoundError:
        pass

    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    sys.path.insert(0, str(src_dir))


_ensure_src_on_path()


class FakeBackend:
    """In-memory persistence backend that records every call."""

    def __init__(self, payloads=None, load_error=None):
        self.payloads = dict(payloads or {})
        self.load_error = load_error
        self.loads = []
        self.saves = []

    async def load(self, name):
        import asyncio

        from lexibayes.exceptions import ClassifierNotFoundError

        self.loads.append(name)
        # Yield to the loop like real I/O would
        await asyncio.sleep(0)
        if self.load_error is not None:
            raise self.load_error
        if name not in self.payloads:
            raise ClassifierNotFoundError(name)
        return self.payloads[name]

    async def save(self, name, payload):
        self.saves.append((name, payload))
        self.payloads[name] = payload


@pytest.fixture
def fs_fake():
    return FakeBackend()


@pytest.fixture
def blob_fake():
    return FakeBackend()


@pytest.fixture
def trained_classifier():
    from lexibayes.bayes import BayesClassifier

    clf = BayesClassifier()
    clf.add_document("i love sunny days at the beach", "positive")
    clf.add_document("what a great happy fun party", "positive")
    clf.add_document("terrible awful cold rain", "negative")
    clf.add_document("sad bad gloomy rain again", "negative")
    return clf
