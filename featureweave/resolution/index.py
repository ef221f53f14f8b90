"""Dependency index.

Multimap from a feature identifier to the pending definitions waiting on it.
Buckets keep insertion order so cascades visit candidates in registration
order, which keeps "first implementation wins" deterministic.
"""

from __future__ import annotations

from typing import Dict, List, Set

from .definition import ImplementationDefinition
from .identifiers import FeatureId


class DependencyIndex:
    """Pending definitions keyed by each of their dependencies."""

    def __init__(self) -> None:
        self._buckets: Dict[FeatureId, Dict[ImplementationDefinition, None]] = {}
        self._filed: Set[ImplementationDefinition] = set()

    def file(self, definition: ImplementationDefinition) -> None:
        """File ``definition`` under every one of its dependencies."""
        for dependency in definition.dependencies:
            self._buckets.setdefault(dependency, {})[definition] = None
        if definition.dependencies:
            self._filed.add(definition)

    def candidates(self, feature: FeatureId) -> List[ImplementationDefinition]:
        """Snapshot of the definitions waiting on ``feature``."""
        return list(self._buckets.get(feature, ()))

    def discard(self, definition: ImplementationDefinition) -> None:
        """Remove ``definition`` from every bucket it was filed under."""
        self._filed.discard(definition)
        for dependency in definition.dependencies:
            bucket = self._buckets.get(dependency)
            if bucket is None:
                continue
            bucket.pop(definition, None)
            if not bucket:
                del self._buckets[dependency]

    def features(self) -> List[FeatureId]:
        """Features that currently have at least one waiting definition."""
        return list(self._buckets)

    def __contains__(self, definition: object) -> bool:
        return definition in self._filed

    def __len__(self) -> int:
        return len(self._filed)
