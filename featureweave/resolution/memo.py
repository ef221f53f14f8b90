"""Memoized, single-flight feature factories.

Each activated (target, feature) pair owns exactly one ``MemoizedFactory``. The
first call starts one ``asyncio.Task`` that resolves the dependency factories
concurrently and then calls the implementation factory. Every other caller,
concurrent or later, shares that outcome.
"""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..errors import FactoryFailure
from ..core.logging_config import get_logger
from .identifiers import FeatureId, TargetId
from .tree import Capabilities

logger = get_logger(__name__)

FeatureFactory = Callable[[Capabilities], Union[Awaitable[Any], Any]]
"""
FeatureFactory:
    A callable that takes the resolved dependency ``Capabilities`` and returns
    the implementation value (or an awaitable of it).
"""


class FactoryState(str, Enum):
    idle = "idle"
    running = "running"
    resolved = "resolved"
    failed = "failed"


class MemoizedFactory:
    """Zero-argument awaitable that builds one feature implementation at most once.

    Construction is shielded from caller cancellation: once started it runs to
    completion. A failure is wrapped in ``FactoryFailure`` and delivered to all
    awaiters. By default the memo is then sealed and keeps raising the same
    failure; with ``retry_failed=True`` it is cleared and the next call retries.
    """

    def __init__(
        self,
        target: TargetId,
        feature: FeatureId,
        factory: FeatureFactory,
        dependencies: Mapping[FeatureId, "MemoizedFactory"],
        *,
        separator: str = "/",
        retry_failed: bool = False,
        log_failures: bool = True,
    ) -> None:
        self.target = target
        self.feature = feature
        self._factory = factory
        self._dependencies = dict(dependencies)
        self._separator = separator
        self._retry_failed = retry_failed
        self._log_failures = log_failures
        self._state = FactoryState.idle
        self._task: Optional[asyncio.Task] = None
        self._value: Any = None
        self._error: Optional[FactoryFailure] = None
        self.calls = 0

    @property
    def state(self) -> FactoryState:
        return self._state

    @property
    def dependencies(self) -> Mapping[FeatureId, "MemoizedFactory"]:
        return dict(self._dependencies)

    async def __call__(self) -> Any:
        if self._state is FactoryState.resolved:
            return self._value
        if self._state is FactoryState.failed:
            raise self._error.with_traceback(None)
        if self._task is None or self._task.cancelled():
            self._state = FactoryState.running
            self._task = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._task)

    async def _run(self) -> Any:
        self.calls += 1
        try:
            names = list(self._dependencies)
            values = await asyncio.gather(*(self._dependencies[name]() for name in names))
            deps = Capabilities(dict(zip(names, values)), self._separator)
            value = self._factory(deps)
            if inspect.isawaitable(value):
                value = await value
        except Exception as exc:
            failure = FactoryFailure(self.target, self.feature, str(exc) or type(exc).__name__)
            if self._log_failures:
                logger.error(f"Factory for feature '{self.feature}' failed on target '{self.target}': {exc!r}")
            if self._retry_failed:
                self._state = FactoryState.idle
                self._task = None
            else:
                self._state = FactoryState.failed
                self._error = failure
            raise failure from exc

        self._value = value
        self._state = FactoryState.resolved
        logger.debug(f"Resolved feature '{self.feature}' for target '{self.target}'")
        return value

    def __repr__(self) -> str:
        return f"MemoizedFactory(target={self.target!r}, feature={self.feature!r}, state={self._state.value})"
