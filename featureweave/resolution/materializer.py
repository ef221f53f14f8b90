"""Capability materializer.

Turns a target and a list of requested features into one ``Capabilities``
object once every requested feature's memoized factory has resolved.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Iterable, Optional

from ..core.logging_config import get_logger
from ..errors import UnknownTargetError, UnresolvedFeatureError
from .identifiers import FeatureLike, feature_id, normalize_features
from .tree import Capabilities

if TYPE_CHECKING:
    from .engine import ResolutionEngine

logger = get_logger(__name__)


class CapabilityMaterializer:
    """Builds composed capability objects from a ``ResolutionEngine``.

    Implementations are memoized per (target, feature) by the engine, so two
    materializations on the same target share every instance, including the
    ones reached through dependency edges.
    """

    def __init__(self, engine: "ResolutionEngine") -> None:
        self._engine = engine

    async def materialize(self, target: FeatureLike, features: Iterable[FeatureLike]) -> Capabilities:
        """Resolve ``features`` on ``target`` concurrently.

        Args:
            target: A target known to the engine.
            features: Requested features. All must be satisfied on the target.

        Returns:
            Capabilities keyed by feature identifier.

        Raises:
            UnknownTargetError: If the engine does not know the target.
            UnresolvedFeatureError: If any requested feature is not satisfied. No
                factory runs in that case.
            FactoryFailure: If building one of the implementations failed.
        """
        name = feature_id(target)
        if not self._engine.has_target(name):
            raise UnknownTargetError(name)

        requested = normalize_features(features)
        factories = [self._engine.factory(name, feature) for feature in requested]
        missing = [feature for feature, factory in zip(requested, factories) if factory is None]
        if missing:
            raise UnresolvedFeatureError(name, missing)

        logger.debug(f"Materializing {list(requested)} on target '{name}'")
        values = await asyncio.gather(*(factory() for factory in factories))
        return Capabilities(dict(zip(requested, values)), self._engine.separator)

    async def materialize_available(self, target: FeatureLike, features: Iterable[FeatureLike]) -> Optional[Capabilities]:
        """Like ``materialize``, but return ``None`` when the features are not all available."""
        requested = normalize_features(features)
        if not self._engine.satisfies(target, requested):
            return None
        return await self.materialize(target, requested)
