"""Resolution engine.

The engine decides, for every target known at construction, which feature
implementations are active. Registrations may arrive in any order; the engine
always converges to the same satisfied feature sets.

Activation rules
----------------

- A definition is activated on a target once every one of its dependencies is
  satisfied there. Its memoized factory captures the dependency factories that
  are installed at that moment, so a feature can only ever depend on features
  that were activated before it. Cycles therefore never resolve: the features
  involved stay unsatisfied and their definitions stay pending.
- Activation is idempotent per (target, feature). The first implementation to
  satisfy a feature on a target stays installed and later candidates for the
  same pair are ignored without cascading. This is what stops cascades from
  looping when pending definitions form cycles.
- Universal definitions are offered to a target only while it lacks the
  feature, so a target-specific implementation that got there first is never
  replaced.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.logging_config import get_logger
from ..errors import RegistrationError, SelfDependencyError, UnknownTargetError
from .definition import BatchFactory, FeatureBatch, ImplementationDefinition
from .identifiers import FeatureId, FeatureLike, TargetId, feature_id, normalize_features
from .index import DependencyIndex
from .materializer import CapabilityMaterializer
from .memo import FeatureFactory, MemoizedFactory
from .state import TargetState
from .tree import Capabilities

logger = get_logger(__name__)


class EngineSnapshot(BaseModel):
    """Point-in-time view of the engine, for diagnostics and comparisons.

    Attributes:
        satisfied: Sorted satisfied features per target.
        pending: Sorted features with waiting target-scoped definitions, per target.
    """

    satisfied: Dict[str, List[str]] = Field(default_factory=dict, description="Satisfied features per target")
    pending: Dict[str, List[str]] = Field(default_factory=dict, description="Features still awaited per target")


class ResolutionEngine:
    """
    Incremental feature resolution over a fixed set of targets.

    Usage:
        engine = ResolutionEngine(["javascript", "python3"])
        engine.register_target_implementation("python3", "evaluate/any/sync", [], make_evaluator)
        engine.register_universal_implementation("evaluate/any", ["evaluate/any/sync"], wrap_async)
        engine.satisfies("python3", ["evaluate/any"])  # True
        caps = await engine.materialize("python3", ["evaluate/any"])
    """

    def __init__(
        self,
        targets: Iterable[FeatureLike],
        *,
        separator: Optional[str] = None,
        strict: Optional[bool] = None,
        retry_failed: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            targets: Every target identifier the engine will ever know about.
            separator: Feature hierarchy separator (defaults to the settings value).
            strict: Raise registration errors instead of logging them.
            retry_failed: Let failed factories be retried on next access.
            settings: Settings instance used for unspecified options.
        """
        cfg = settings or default_settings
        self.separator = separator or cfg.feature_separator
        self.strict = cfg.strict_registration if strict is None else strict
        self.retry_failed = cfg.retry_failed_factories if retry_failed is None else retry_failed
        self._states: Dict[TargetId, TargetState] = {
            target: TargetState(target=target) for target in normalize_features(targets)
        }
        # Universal definitions waiting on a dependency, shared by every target.
        self._universal = DependencyIndex()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_target_implementation(
        self,
        target: FeatureLike,
        feature: FeatureLike,
        dependencies: Iterable[FeatureLike],
        factory: FeatureFactory,
    ) -> Optional[ImplementationDefinition]:
        """Register an implementation of ``feature`` for a single target.

        Args:
            target: A target passed at construction.
            feature: The feature being implemented.
            dependencies: Features the implementation needs on the same target.
            factory: Builds the implementation from its resolved dependencies.

        Returns:
            The accepted definition, or ``None`` when the registration was rejected.

        Raises:
            SelfDependencyError: Only in strict mode.
            UnknownTargetError: Only in strict mode.
        """
        return self._register(feature_id(target), feature, dependencies, factory)

    def register_universal_implementation(
        self,
        feature: FeatureLike,
        dependencies: Iterable[FeatureLike],
        factory: FeatureFactory,
    ) -> Optional[ImplementationDefinition]:
        """Register an implementation of ``feature`` offered to every target.

        Targets that already satisfy ``feature`` keep their implementation.

        Returns:
            The accepted definition, or ``None`` when the registration was rejected.
        """
        return self._register(None, feature, dependencies, factory)

    def register_many(
        self,
        target: Optional[FeatureLike],
        features: Sequence[FeatureLike],
        dependencies: Iterable[FeatureLike],
        batch_factory: BatchFactory,
    ) -> List[ImplementationDefinition]:
        """Register several features produced together by one factory call.

        Args:
            target: Target identifier, or ``None`` for a universal batch.
            features: Features produced by ``batch_factory``.
            dependencies: Features every member of the batch needs.
            batch_factory: Returns a mapping of feature to implementation. It runs
                at most once per target, whichever member is built first.

        Returns:
            The accepted definitions.

        Raises:
            RegistrationError: Only in strict mode, before any member is registered.
        """
        scope = None if target is None else feature_id(target)
        names = normalize_features(features)
        deps = normalize_features(dependencies)
        if self.strict:
            for name in names:
                error = self._check(scope, name, deps)
                if error is not None:
                    raise error
        batch = FeatureBatch(names, batch_factory)
        accepted = []
        for name in names:
            definition = self._register(scope, name, deps, batch_factory, batch=batch)
            if definition is not None:
                accepted.append(definition)
        return accepted

    def _register(
        self,
        scope: Optional[TargetId],
        feature: FeatureLike,
        dependencies: Iterable[FeatureLike],
        factory: FeatureFactory,
        batch: Optional[FeatureBatch] = None,
    ) -> Optional[ImplementationDefinition]:
        name = feature_id(feature)
        deps = normalize_features(dependencies)

        error = self._check(scope, name, deps)
        if error is not None:
            self._reject(error)
            return None

        definition = ImplementationDefinition(feature=name, scope=scope, dependencies=deps, factory=factory, batch=batch)
        where = "all targets" if scope is None else f"target '{scope}'"
        logger.debug(f"Registering '{name}' for {where} with dependencies {list(deps)}")

        if scope is None:
            for state in self._states.values():
                self._offer_universal(state, definition)
            self._universal.file(definition)
            return definition

        state = self._states[scope]
        if state.satisfies(deps):
            self._activate(state, definition)
        else:
            logger.debug(f"'{name}' on target '{scope}' is waiting on {state.missing(deps)}")
            state.pending.file(definition)
        return definition

    def _check(
        self, scope: Optional[TargetId], name: FeatureId, deps: Tuple[FeatureId, ...]
    ) -> Optional[RegistrationError]:
        if name in deps:
            return SelfDependencyError(name)
        if scope is not None and scope not in self._states:
            return UnknownTargetError(scope)
        return None

    def _reject(self, error: RegistrationError) -> None:
        if self.strict:
            raise error
        logger.error(f"{error}. Skipping.")

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def _offer_universal(self, state: TargetState, definition: ImplementationDefinition) -> None:
        if definition.feature not in state.satisfied and state.satisfies(definition.dependencies):
            self._activate(state, definition)

    def _activate(self, state: TargetState, definition: ImplementationDefinition) -> None:
        if definition.feature in state.satisfied:
            logger.debug(
                f"'{definition.feature}' is already satisfied on target '{state.target}'; "
                f"keeping the existing implementation"
            )
            return

        dependencies = {dep: state.factories[dep] for dep in definition.dependencies}
        state.factories[definition.feature] = MemoizedFactory(
            state.target,
            definition.feature,
            definition.factory_for(state.target, retry_failed=self.retry_failed),
            dependencies,
            separator=self.separator,
            retry_failed=self.retry_failed,
        )
        state.satisfied.add(definition.feature)
        logger.debug(f"Activated '{definition.feature}' on target '{state.target}'")

        self._cascade(state, definition.feature)

    def _cascade(self, state: TargetState, feature: FeatureId) -> None:
        for candidate in state.pending.candidates(feature):
            if candidate in state.pending and state.satisfies(candidate.dependencies):
                state.pending.discard(candidate)
                self._activate(state, candidate)
        for candidate in self._universal.candidates(feature):
            self._offer_universal(state, candidate)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def targets(self) -> Tuple[TargetId, ...]:
        return tuple(self._states)

    def _state(self, target: FeatureLike) -> TargetState:
        name = feature_id(target)
        try:
            return self._states[name]
        except KeyError as e:
            raise UnknownTargetError(name) from e

    def has_target(self, target: FeatureLike) -> bool:
        return feature_id(target) in self._states

    def satisfies(self, target: FeatureLike, features: Iterable[FeatureLike]) -> bool:
        """Whether ``target`` currently satisfies every feature in ``features``.

        Unknown targets satisfy nothing.
        """
        state = self._states.get(feature_id(target))
        if state is None:
            return False
        return state.satisfies(normalize_features(features))

    def has_feature(self, target: FeatureLike, feature: FeatureLike) -> bool:
        return self.satisfies(target, [feature])

    def satisfied_features(self, target: FeatureLike) -> frozenset:
        """Features currently satisfied on ``target``.

        Raises:
            UnknownTargetError: If the target was not passed at construction.
        """
        return frozenset(self._state(target).satisfied)

    def pending_features(self, target: FeatureLike) -> frozenset:
        """Features that target-scoped definitions on ``target`` are still waiting for."""
        return frozenset(self._state(target).pending.features())

    def targets_with_features(self, features: Iterable[FeatureLike]) -> List[TargetId]:
        """Targets satisfying every feature in ``features``, in construction order."""
        wanted = normalize_features(features)
        return [target for target, state in self._states.items() if state.satisfies(wanted)]

    def factory(self, target: FeatureLike, feature: FeatureLike) -> Optional[MemoizedFactory]:
        """The memoized factory installed for ``feature`` on ``target``, if any."""
        state = self._states.get(feature_id(target))
        if state is None:
            return None
        return state.factories.get(feature_id(feature))

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            satisfied={target: sorted(state.satisfied) for target, state in self._states.items()},
            pending={target: sorted(state.pending.features()) for target, state in self._states.items()},
        )

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    async def materialize(self, target: FeatureLike, features: Iterable[FeatureLike]) -> Capabilities:
        """Build the capabilities of ``features`` on ``target``.

        See ``CapabilityMaterializer.materialize``.
        """
        return await CapabilityMaterializer(self).materialize(target, features)

    def __repr__(self) -> str:
        return f"ResolutionEngine(targets={list(self._states)!r})"
