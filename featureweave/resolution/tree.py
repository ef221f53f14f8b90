"""Capability objects handed to factories and to materialization callers.

A ``Capabilities`` value is a read-only mapping from flat feature identifier to
the resolved implementation. The hierarchical view (``"repl/instanced"`` and
``"repl/evaluate"`` grouped under ``"repl"``) is computed once, on first access
to ``tree``, by the pure function ``build_capability_tree``.
"""

from __future__ import annotations

from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Set, Tuple

from ..errors import FeatureTreeConflictError
from .identifiers import FeatureId, FeatureLike, feature_id


def build_capability_tree(values: Mapping[FeatureId, Any], separator: str = "/") -> Mapping[str, Any]:
    """Group flat feature identifiers into nested read-only mappings.

    Args:
        values: Mapping of feature identifier to implementation value.
        separator: Hierarchy separator used by the identifiers.

    Returns:
        A nested read-only mapping, e.g. ``{"repl": {"instanced": impl}}``.

    Raises:
        FeatureTreeConflictError: If one identifier is a prefix path of another,
            so that a single node would have to be both a value and a group.
    """
    root: Dict[str, Any] = {}
    # Keyed by path segments so that empty segments ("/a") stay distinct groups.
    groups: Dict[Tuple[str, ...], Dict[str, Any]] = {(): root}
    for name, value in values.items():
        *parents, leaf = name.split(separator)
        node = root
        path: Tuple[str, ...] = ()
        for part in parents:
            path += (part,)
            if path not in groups:
                if part in node:
                    raise FeatureTreeConflictError(separator.join(path))
                node[part] = groups[path] = {}
            node = groups[path]
        if leaf in node:
            raise FeatureTreeConflictError(name)
        node[leaf] = value
    return _freeze(root, {id(group) for group in groups.values()})


def _freeze(node: Dict[str, Any], group_ids: Set[int]) -> Mapping[str, Any]:
    return MappingProxyType(
        {key: _freeze(value, group_ids) if id(value) in group_ids else value for key, value in node.items()}
    )


class Capabilities(Mapping[FeatureId, Any]):
    """Read-only view of resolved feature implementations.

    Lookups accept plain identifiers or ``str`` enum members::

        caps["evaluate/any"].evaluate("1 + 1")
        caps.tree["evaluate"]["any"]
        caps.group("repl")["instanced"]
    """

    def __init__(self, values: Mapping[FeatureId, Any], separator: str = "/") -> None:
        self._values: Dict[FeatureId, Any] = dict(values)
        self._separator = separator

    def __getitem__(self, feature: FeatureLike) -> Any:
        return self._values[feature_id(feature)]

    def __contains__(self, feature: object) -> bool:
        if not isinstance(feature, str):
            return False
        return feature_id(feature) in self._values

    def __iter__(self) -> Iterator[FeatureId]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Capabilities({sorted(self._values)!r})"

    @property
    def separator(self) -> str:
        return self._separator

    @cached_property
    def tree(self) -> Mapping[str, Any]:
        """Nested view grouped by the hierarchy separator."""
        return build_capability_tree(self._values, self._separator)

    def group(self, prefix: FeatureLike) -> Mapping[str, Any]:
        """Return the subtree found under ``prefix`` (e.g. ``"repl"`` or ``"repl/instanced"``).

        Raises:
            KeyError: If no feature lives under the prefix.
        """
        node: Any = self.tree
        for part in feature_id(prefix).split(self._separator):
            if not isinstance(node, Mapping) or part not in node:
                raise KeyError(feature_id(prefix))
            node = node[part]
        return node
