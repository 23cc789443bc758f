"""Pytest configuration and shared fixtures for sfc-loader tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest


class FakeFiles:
    """In-memory get_file collaborator that records every fetch.

    Values may be text, a (content, extname) pair, or anything else (to
    exercise invalid-content handling). A delay makes each fetch suspend so
    concurrent requests overlap.
    """

    def __init__(self, files: dict[str, Any] | None = None, delay: float = 0.0) -> None:
        self.files = dict(files or {})
        self.delay = delay
        self.calls: list[str] = []

    async def __call__(self, path: str) -> Any:
        self.calls.append(path)
        await asyncio.sleep(self.delay)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def count(self, path: str) -> int:
        return self.calls.count(path)


@pytest.fixture
def fake_files() -> Callable[..., FakeFiles]:
    """Factory for FakeFiles collaborators."""
    return FakeFiles


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Run with empty user/project settings under tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path
