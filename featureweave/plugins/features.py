"""Well-known features and the shape of their implementations.

Feature identifiers are open strings: plugins may implement features that are
not listed here. ``FeatureName`` only names the ones the built-in adapters and
the host system understand, and the protocols below describe the objects their
implementations are expected to expose.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, List, Protocol, Sequence, runtime_checkable


class FeatureName(str, Enum):
    requires_browser = "requires/browser"
    requires_setup = "requires/setup"
    iframe_static = "iframe/static"
    worker_static = "worker/static"
    evaluate_string = "evaluate/string"
    evaluate_any = "evaluate/any"
    evaluate_any_sync = "evaluate/any/sync"
    entry_point_void = "entryPoint/void"
    entry_point_string = "entryPoint/string"
    entry_point_any = "entryPoint/any"
    entry_point_any_sync = "entryPoint/any/sync"
    repl_global = "repl/global"
    repl_global_eval_sync = "repl/global/evalSync"
    repl_instanced = "repl/instanced"
    repl_instanced_startup_sync = "repl/instanced/startupSync"
    repl_instanced_eval_sync = "repl/instanced/evalSync"
    repl_instanced_full_sync = "repl/instanced/fullSync"


@runtime_checkable
class BrowserRequirement(Protocol):
    """``requires/browser``: the target only runs in some browsers."""

    def is_compatible(self) -> bool: ...

    def get_recommended_browsers(self) -> Sequence[str]: ...


@runtime_checkable
class SetupRequirement(Protocol):
    """``requires/setup``: the target needs a one-off setup step before use."""

    async def setup(self) -> None: ...


@runtime_checkable
class StaticCompiler(Protocol):
    """``worker/static`` (and the compile half of ``iframe/static``)."""

    async def compile(self, code: str) -> str: ...


@runtime_checkable
class SyncEvaluator(Protocol):
    """``evaluate/any/sync``"""

    def evaluate(self, code: str) -> Any: ...


@runtime_checkable
class Evaluator(Protocol):
    """``evaluate/any`` and ``evaluate/string``"""

    async def evaluate(self, code: str) -> Any: ...


@runtime_checkable
class SyncEntryPointProvider(Protocol):
    """``entryPoint/any/sync``: look up a callable named ``name`` in ``code``."""

    def entry_point(self, code: str, name: str) -> Callable[..., Any]: ...


@runtime_checkable
class EntryPointProvider(Protocol):
    """``entryPoint/any``, ``entryPoint/void`` and ``entryPoint/string``"""

    def entry_point(self, code: str, name: str) -> Callable[..., Awaitable[Any]]: ...


@runtime_checkable
class SyncReplSession(Protocol):
    def evaluate(self, code: str) -> List[str]: ...


@runtime_checkable
class ReplSession(Protocol):
    async def evaluate(self, code: str) -> List[str]: ...


@runtime_checkable
class SyncReplFactory(Protocol):
    """``repl/instanced/fullSync``: create sessions and evaluate without awaiting."""

    def create_instance(self) -> SyncReplSession: ...
