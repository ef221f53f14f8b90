"""Feature identifier helpers.

Feature identifiers are plain strings. A ``str``-valued ``Enum`` member (such as
``FeatureName.evaluate_any``) is accepted anywhere an identifier is, and is
normalized to its value so that hashing and equality stay structural.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Tuple, Union

FeatureId = str
TargetId = str

FeatureLike = Union[str, Enum]

RESERVED_NAMESPACE = "requires"


def feature_id(feature: FeatureLike) -> FeatureId:
    """Normalize a feature (or target) identifier to a plain string."""
    if isinstance(feature, Enum):
        return str(feature.value)
    return str(feature)


def normalize_features(features: Iterable[FeatureLike]) -> Tuple[FeatureId, ...]:
    """Normalize identifiers, dropping duplicates while keeping first-seen order."""
    seen: dict[FeatureId, None] = {}
    for feature in features:
        seen.setdefault(feature_id(feature), None)
    return tuple(seen)


def split_feature(feature: FeatureLike, separator: str = "/") -> List[str]:
    """Split an identifier into its hierarchy segments.

    Example:
        ``split_feature("repl/instanced")`` returns ``["repl", "instanced"]``.
    """
    return feature_id(feature).split(separator)


def is_reserved_feature(feature: FeatureLike, separator: str = "/") -> bool:
    """Whether the feature lives in the ``requires`` namespace.

    Those features describe what the host must provide for a target (for example
    a particular browser) rather than something an activity can consume.
    """
    return split_feature(feature, separator)[0] == RESERVED_NAMESPACE
