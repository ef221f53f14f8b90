"""Error types for featureweave.

Defines a small hierarchy of exceptions raised by the resolution engine and the
capability materializer. None of them is fatal to the process: each one is
scoped to the registration or materialization call that triggered it.
"""

from __future__ import annotations

from typing import Iterable, Tuple


class FeatureweaveError(Exception):
    """Base error for all featureweave exceptions."""


class RegistrationError(FeatureweaveError):
    """Base error for rejected implementation registrations."""


class SelfDependencyError(RegistrationError):
    """Raised when an implementation lists its own feature as a dependency."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"Feature '{feature}' cannot depend on itself")


class UnknownTargetError(RegistrationError):
    """Raised when a target identifier was not known at engine construction."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Unknown target: '{target}'")


class UnresolvedFeatureError(FeatureweaveError):
    """Raised when materialization asks for features a target does not satisfy."""

    def __init__(self, target: str, features: Iterable[str]) -> None:
        self.target = target
        self.features: Tuple[str, ...] = tuple(features)
        super().__init__(f"Target '{target}' does not satisfy features: {', '.join(self.features)}")


class FactoryFailure(FeatureweaveError):
    """Raised when a feature implementation factory fails.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, target: str, feature: str, message: str) -> None:
        self.target = target
        self.feature = feature
        super().__init__(f"Factory for '{feature}' on target '{target}' failed: {message}")


class FeatureTreeConflictError(FeatureweaveError):
    """Raised when a feature path is used both as a leaf and as a group."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Feature path '{path}' is both an implementation and a group")
