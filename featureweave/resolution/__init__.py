"""Feature resolution and capability materialization.

 A *feature* is a named capability a target (for example a language runtime)
 may or may not support. Plugins register *implementations* of features, each
 declaring the features it depends on.

 - ``ResolutionEngine`` tracks, per target, which features are satisfied and
   activates pending implementations as their dependencies become available.
 - ``CapabilityMaterializer`` builds the implementations a caller asks for,
   memoized once per target and feature.
 - ``Capabilities`` is the read-only result, keyed by feature identifier with a
   nested ``tree`` view grouped by the hierarchy separator.

 This package exports:

 - ``ResolutionEngine``/``EngineSnapshot``: registration, propagation and queries.
 - ``CapabilityMaterializer``/``Capabilities``: materialization results.
 - ``ImplementationDefinition``/``FeatureBatch``: registered candidates.
 - ``MemoizedFactory``/``FactoryState``: single-flight factory wrappers.
 """

from .definition import FeatureBatch, ImplementationDefinition
from .engine import EngineSnapshot, ResolutionEngine
from .identifiers import FeatureId, TargetId, feature_id, is_reserved_feature, split_feature
from .index import DependencyIndex
from .materializer import CapabilityMaterializer
from .memo import FactoryState, MemoizedFactory
from .state import TargetState
from .tree import Capabilities, build_capability_tree

__all__ = [
    "Capabilities",
    "CapabilityMaterializer",
    "DependencyIndex",
    "EngineSnapshot",
    "FactoryState",
    "FeatureBatch",
    "FeatureId",
    "ImplementationDefinition",
    "MemoizedFactory",
    "ResolutionEngine",
    "TargetId",
    "TargetState",
    "build_capability_tree",
    "feature_id",
    "is_reserved_feature",
    "split_feature",
]
