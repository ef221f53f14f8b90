"""Plugin hook interface and loading sequence.

A plugin contributes feature implementations by registering them on the
``ResolutionEngine`` it is handed. Loading is sequential: one engine is built
for the known targets and every plugin's hook runs against it in order.
"""

from __future__ import annotations

from typing import Iterable, Optional, Type, Union

from ..core.config import Settings
from ..core.logging_config import get_logger
from ..resolution.engine import ResolutionEngine
from ..resolution.identifiers import FeatureLike

logger = get_logger(__name__)


class Plugin:
    """Base class for plugins.

    Subclasses override the hooks they need. The default hook does nothing.
    """

    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or type(self).__name__

    def register_features(self, engine: ResolutionEngine) -> None:
        """Register feature implementations on ``engine``."""


PluginLike = Union[Plugin, Type[Plugin]]


def load_plugins(
    targets: Iterable[FeatureLike],
    plugins: Iterable[PluginLike],
    *,
    settings: Optional[Settings] = None,
) -> ResolutionEngine:
    """Build a resolution engine for ``targets`` and let every plugin register on it.

    Plugin classes are instantiated with no arguments. A plugin whose hook raises
    is logged and skipped; whatever it registered before failing is kept.

    Args:
        targets: Every target the engine will know about.
        plugins: Plugin instances or classes, loaded in order.
        settings: Optional settings passed to the engine.

    Returns:
        The populated engine.
    """
    engine = ResolutionEngine(targets, settings=settings)
    for plugin in plugins:
        instance = plugin() if isinstance(plugin, type) else plugin
        try:
            instance.register_features(engine)
        except Exception:
            logger.exception(f"Plugin '{instance.display_name}' failed to register its features. Skipping.")
            continue
        logger.info(f"Loaded plugin '{instance.display_name}'")
    return engine
