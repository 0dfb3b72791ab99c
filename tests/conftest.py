"""Pytest configuration for the backend test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path

import pytest

from diffcommit_backend.models.edit import EditMode
from diffcommit_backend.models.selection import RangeInput, RangeResult
from diffcommit_backend.services.config_manager import ConfigManager


class FakeEditService:
    """In-memory range edit service recording its calls."""

    def __init__(self, transform=str.upper, skip: set[str] | None = None, error: Exception | None = None):
        self.transform = transform
        self.skip = skip or set()
        self.error = error
        self.calls: list[tuple[list[RangeInput], EditMode]] = []
        self.gate: asyncio.Event | None = None

    async def edit_ranges(self, ranges: list[RangeInput], mode: EditMode) -> list[RangeResult]:
        self.calls.append((ranges, mode))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [RangeResult(id=r.id, result=self.transform(r.text)) for r in ranges if r.id not in self.skip]


@pytest.fixture
def anyio_backend() -> str:
    """Run coroutine tests on the asyncio event loop."""

    return "asyncio"


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the config manager at a temporary directory."""

    directory = tmp_path / "config"
    monkeypatch.setenv("DIFFCOMMIT_CONFIG_DIR", str(directory))
    ConfigManager.reset_instance()
    yield directory
    ConfigManager.reset_instance()


@pytest.fixture
def fake_service() -> FakeEditService:
    return FakeEditService()


@pytest.fixture
def edit_service_factory() -> type[FakeEditService]:
    """Build fake edit services with custom behaviour."""

    return FakeEditService
