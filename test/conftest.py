from __future__ import annotations

from typing import Any, Callable, Dict, List

import pytest

from featureweave.core.config import Settings
from featureweave.resolution import Capabilities, ResolutionEngine


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(_env_file=None, strict_registration=False, retry_failed_factories=False, feature_separator="/")


@pytest.fixture
def engine(test_settings: Settings) -> ResolutionEngine:
    return ResolutionEngine(["ts", "py"], settings=test_settings)


class FactoryRecorder:
    """Builds factories that record every invocation and the dependencies they received."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.received: Dict[str, Capabilities] = {}

    def __call__(self, label: str, value: Any = None) -> Callable[[Capabilities], Any]:
        async def factory(deps: Capabilities) -> Any:
            self.calls.append(label)
            self.received[label] = deps
            return label if value is None else value

        return factory

    def count(self, label: str) -> int:
        return self.calls.count(label)


@pytest.fixture
def recorder() -> FactoryRecorder:
    return FactoryRecorder()
