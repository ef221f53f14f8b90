"""featureweave.

This package resolves which feature implementations are available for which
targets in a plugin system, and builds those implementations on demand.

High-level architecture
-----------------------

- **Features** are named capabilities (``"evaluate/any"``, ``"repl/instanced"``)
  that a target, typically a programming-language runtime, may support.
- **Implementations** of a feature are registered by plugins, either for one
  target or universally, and declare the features they depend on.

Core subpackages
----------------

- ``featureweave.resolution``:

  - ``ResolutionEngine``: incremental, order-independent activation of
    implementations as their dependencies become satisfied.
  - ``CapabilityMaterializer``: concurrent, memoized construction of the
    implementations a caller requests.

- ``featureweave.plugins``:

  - The ``Plugin`` hook interface and ``load_plugins`` sequence.
  - Built-in universal adapters between the well-known features.

Typical workflow
----------------

1. Build an engine for the known targets with ``load_plugins``.
2. Ask which targets support an activity's features with
   ``engine.targets_with_features``.
3. Run the activity on a chosen target with ``await engine.materialize``.
"""

from featureweave.errors import (
    FactoryFailure,
    FeatureTreeConflictError,
    FeatureweaveError,
    RegistrationError,
    SelfDependencyError,
    UnknownTargetError,
    UnresolvedFeatureError,
)
from featureweave.plugins import CoreFeaturesPlugin, FeatureName, Plugin, load_plugins
from featureweave.resolution import (
    Capabilities,
    CapabilityMaterializer,
    EngineSnapshot,
    ResolutionEngine,
)

__all__ = [
    "Capabilities",
    "CapabilityMaterializer",
    "CoreFeaturesPlugin",
    "EngineSnapshot",
    "FactoryFailure",
    "FeatureName",
    "FeatureTreeConflictError",
    "FeatureweaveError",
    "Plugin",
    "RegistrationError",
    "ResolutionEngine",
    "SelfDependencyError",
    "UnknownTargetError",
    "UnresolvedFeatureError",
    "load_plugins",
]
