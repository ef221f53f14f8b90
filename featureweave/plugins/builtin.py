"""Built-in universal adapters.

These implementations derive features from one another so that a language
plugin only has to provide its most natural primitives. For example, a target
that implements ``evaluate/any/sync`` gets ``evaluate/any`` and
``evaluate/string`` for free, and a target with ``repl/instanced/fullSync``
gets every REPL flavor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

from ..resolution.engine import ResolutionEngine
from ..resolution.tree import Capabilities
from .base import Plugin
from .features import (
    Evaluator,
    FeatureName,
    ReplSession,
    SyncEntryPointProvider,
    SyncEvaluator,
    SyncReplFactory,
    SyncReplSession,
)


@dataclass(frozen=True)
class AsyncEvaluator:
    """``evaluate/any`` built on ``evaluate/any/sync``."""

    sync: SyncEvaluator

    async def evaluate(self, code: str) -> Any:
        return self.sync.evaluate(code)


@dataclass(frozen=True)
class StringEvaluator:
    """``evaluate/string`` built on ``evaluate/any``."""

    inner: Evaluator

    async def evaluate(self, code: str) -> str:
        return str(await self.inner.evaluate(code))


@dataclass(frozen=True)
class AsyncEntryPointProvider:
    """``entryPoint/any`` built on ``entryPoint/any/sync``."""

    sync: SyncEntryPointProvider

    def entry_point(self, code: str, name: str) -> Callable[..., Awaitable[Any]]:
        fn = self.sync.entry_point(code, name)

        async def call(*args: Any) -> Any:
            return fn(*args)

        return call


@dataclass(frozen=True)
class AsyncReplSession:
    """Awaitable view of a synchronous REPL session."""

    session: SyncReplSession

    async def evaluate(self, code: str) -> List[str]:
        return self.session.evaluate(code)

    def destroy(self) -> None:
        destroy = getattr(self.session, "destroy", None)
        if destroy is not None:
            destroy()


@dataclass(frozen=True)
class StartupSyncRepl:
    """``repl/instanced/startupSync``: sessions start synchronously, evaluate asynchronously."""

    full: SyncReplFactory

    def create_instance(self) -> AsyncReplSession:
        return AsyncReplSession(self.full.create_instance())


@dataclass(frozen=True)
class EvalSyncRepl:
    """``repl/instanced/evalSync``: sessions start asynchronously, evaluate synchronously."""

    full: SyncReplFactory

    async def create_instance(self) -> SyncReplSession:
        return self.full.create_instance()


@dataclass(frozen=True)
class InstancedRepl:
    """``repl/instanced`` built on either partially synchronous flavor."""

    create: Callable[[], Awaitable[ReplSession]]

    async def create_instance(self) -> ReplSession:
        return await self.create()


async def _entry_point_any(deps: Capabilities) -> AsyncEntryPointProvider:
    return AsyncEntryPointProvider(deps[FeatureName.entry_point_any_sync])


async def _typed_entry_points(deps: Capabilities) -> dict:
    provider = deps[FeatureName.entry_point_any]
    return {
        FeatureName.entry_point_void: provider,
        FeatureName.entry_point_string: provider,
    }


async def _evaluate_any(deps: Capabilities) -> AsyncEvaluator:
    return AsyncEvaluator(deps[FeatureName.evaluate_any_sync])


async def _evaluate_string(deps: Capabilities) -> StringEvaluator:
    return StringEvaluator(deps[FeatureName.evaluate_any])


async def _partially_sync_repls(deps: Capabilities) -> dict:
    full = deps[FeatureName.repl_instanced_full_sync]
    return {
        FeatureName.repl_instanced_startup_sync: StartupSyncRepl(full),
        FeatureName.repl_instanced_eval_sync: EvalSyncRepl(full),
    }


async def _repl_from_startup_sync(deps: Capabilities) -> InstancedRepl:
    startup = deps[FeatureName.repl_instanced_startup_sync]

    async def create() -> ReplSession:
        return startup.create_instance()

    return InstancedRepl(create)


async def _repl_from_eval_sync(deps: Capabilities) -> InstancedRepl:
    eval_sync = deps[FeatureName.repl_instanced_eval_sync]

    async def create() -> ReplSession:
        return AsyncReplSession(await eval_sync.create_instance())

    return InstancedRepl(create)


async def _global_repl_eval_sync(deps: Capabilities) -> SyncReplSession:
    return await deps[FeatureName.repl_instanced_eval_sync].create_instance()


async def _global_repl_from_instanced(deps: Capabilities) -> ReplSession:
    return await deps[FeatureName.repl_instanced].create_instance()


async def _global_repl_from_eval_sync(deps: Capabilities) -> AsyncReplSession:
    return AsyncReplSession(deps[FeatureName.repl_global_eval_sync])


class CoreFeaturesPlugin(Plugin):
    """Registers the universal adapters between the well-known features."""

    name = "core-features"

    def register_features(self, engine: ResolutionEngine) -> None:
        engine.register_universal_implementation(
            FeatureName.entry_point_any, [FeatureName.entry_point_any_sync], _entry_point_any
        )
        engine.register_many(
            None,
            [FeatureName.entry_point_void, FeatureName.entry_point_string],
            [FeatureName.entry_point_any],
            _typed_entry_points,
        )

        engine.register_universal_implementation(
            FeatureName.evaluate_any, [FeatureName.evaluate_any_sync], _evaluate_any
        )
        engine.register_universal_implementation(
            FeatureName.evaluate_string, [FeatureName.evaluate_any], _evaluate_string
        )

        engine.register_many(
            None,
            [FeatureName.repl_instanced_startup_sync, FeatureName.repl_instanced_eval_sync],
            [FeatureName.repl_instanced_full_sync],
            _partially_sync_repls,
        )
        engine.register_universal_implementation(
            FeatureName.repl_instanced, [FeatureName.repl_instanced_startup_sync], _repl_from_startup_sync
        )
        engine.register_universal_implementation(
            FeatureName.repl_instanced, [FeatureName.repl_instanced_eval_sync], _repl_from_eval_sync
        )
        engine.register_universal_implementation(
            FeatureName.repl_global_eval_sync, [FeatureName.repl_instanced_eval_sync], _global_repl_eval_sync
        )
        engine.register_universal_implementation(
            FeatureName.repl_global, [FeatureName.repl_instanced], _global_repl_from_instanced
        )
        engine.register_universal_implementation(
            FeatureName.repl_global, [FeatureName.repl_global_eval_sync], _global_repl_from_eval_sync
        )
