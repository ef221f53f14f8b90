"""Plugins contributing feature implementations.

This package exports:

- ``Plugin``: base class with the ``register_features`` hook.
- ``load_plugins``: builds a ``ResolutionEngine`` and runs every plugin hook.
- ``CoreFeaturesPlugin``: universal adapters between the well-known features.
- ``FeatureName``: the well-known feature identifiers.
"""

from .base import Plugin, load_plugins
from .builtin import CoreFeaturesPlugin
from .features import FeatureName

__all__ = [
    "CoreFeaturesPlugin",
    "FeatureName",
    "Plugin",
    "load_plugins",
]
