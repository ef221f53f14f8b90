"""Per-target resolution state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .identifiers import FeatureId, TargetId
from .index import DependencyIndex
from .memo import MemoizedFactory


@dataclass
class TargetState:
    """
    Resolution state of one target.

    Attributes:
        target: The target identifier.
        satisfied: Features implemented for the target. Only ever grows.
        pending: Target-scoped definitions waiting on a dependency.
        factories: Memoized factory of every satisfied feature.
    """

    target: TargetId
    satisfied: Set[FeatureId] = field(default_factory=set)
    pending: DependencyIndex = field(default_factory=DependencyIndex)
    factories: Dict[FeatureId, MemoizedFactory] = field(default_factory=dict)

    def missing(self, dependencies: Iterable[FeatureId]) -> List[FeatureId]:
        """Dependencies not yet satisfied on this target."""
        return [dependency for dependency in dependencies if dependency not in self.satisfied]

    def satisfies(self, features: Iterable[FeatureId]) -> bool:
        return all(feature in self.satisfied for feature in features)
