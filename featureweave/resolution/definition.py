"""Implementation definitions.

An ``ImplementationDefinition`` is one candidate implementation of exactly one
feature, either for a single target or universal (``scope is None``). Several
definitions registered together through ``register_many`` share a
``FeatureBatch`` so that the batch factory runs once per target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

from ..errors import FactoryFailure
from .identifiers import FeatureId, TargetId, feature_id
from .memo import FeatureFactory, MemoizedFactory
from .tree import Capabilities

BatchFactory = Callable[[Capabilities], Union[Awaitable[Mapping[Any, Any]], Mapping[Any, Any]]]
"""
BatchFactory:
    A callable that takes the resolved dependency ``Capabilities`` and returns a
    mapping of feature identifier to implementation value for every feature of
    the batch.
"""


class FeatureBatch:
    """Shared invocation of a batch factory, memoized per target."""

    def __init__(self, features: Tuple[FeatureId, ...], factory: BatchFactory) -> None:
        self.features = features
        self.factory = factory
        self.name = "+".join(features)
        self._calls: Dict[TargetId, MemoizedFactory] = {}

    def call_for(self, target: TargetId) -> Optional[MemoizedFactory]:
        return self._calls.get(target)

    def slice(self, target: TargetId, feature: FeatureId, *, retry_failed: bool = False) -> FeatureFactory:
        """Build the factory of one batch member on ``target``."""

        async def produce(deps: Capabilities) -> Any:
            call = self._calls.get(target)
            if call is None:
                call = self._calls[target] = MemoizedFactory(
                    target,
                    self.name,
                    lambda _: self.factory(deps),
                    {},
                    separator=deps.separator,
                    retry_failed=retry_failed,
                    log_failures=False,
                )
            try:
                result = await call()
            except FactoryFailure as failure:
                error = failure.__cause__
            else:
                error = None
            if error is not None:
                # Each member reports the batch error itself.
                raise error
            for key, value in result.items():
                if feature_id(key) == feature:
                    return value
            raise KeyError(f"batch '{self.name}' did not produce '{feature}'")

        return produce


@dataclass(frozen=True, eq=False)
class ImplementationDefinition:
    """
    One candidate implementation of a feature.

    Attributes:
        feature: The identifier this definition implements.
        scope: The target it applies to, or ``None`` for a universal definition.
        dependencies: Features that must be satisfied on the same target first.
        factory: Builds the implementation from the resolved dependencies.
        batch: Shared batch invocation when registered through ``register_many``.
    """

    feature: FeatureId
    scope: Optional[TargetId]
    dependencies: Tuple[FeatureId, ...]
    factory: FeatureFactory
    batch: Optional[FeatureBatch] = field(default=None, repr=False)

    @property
    def is_universal(self) -> bool:
        return self.scope is None

    def factory_for(self, target: TargetId, *, retry_failed: bool = False) -> FeatureFactory:
        """Return the factory that builds this feature on ``target``."""
        if self.batch is None:
            return self.factory
        return self.batch.slice(target, self.feature, retry_failed=retry_failed)
