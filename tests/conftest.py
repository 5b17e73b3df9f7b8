from __future__ import annotations

import pytest

from red_engine.runtime import EditorSettings
from red_engine.session import EditorSession


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings(tmp_path) -> EditorSettings:
    return EditorSettings(config_dir=tmp_path / "config")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(settings: EditorSettings, clock: FakeClock) -> EditorSession:
    return EditorSession(settings, clock=clock)
