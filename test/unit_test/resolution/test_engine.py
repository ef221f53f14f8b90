from __future__ import annotations

import itertools
import logging

import pytest

from featureweave.errors import SelfDependencyError, UnknownTargetError
from featureweave.plugins.features import FeatureName
from featureweave.resolution import EngineSnapshot, ResolutionEngine


async def _noop(deps):
    return None


class TestTargetRegistration:
    def test_feature_without_dependencies_is_satisfied_immediately(self, engine: ResolutionEngine) -> None:
        definition = engine.register_target_implementation("ts", "a", [], _noop)

        assert definition is not None
        assert definition.scope == "ts"
        assert engine.has_feature("ts", "a") is True
        assert engine.has_feature("py", "a") is False

    def test_feature_with_unmet_dependency_stays_pending(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "b", ["a"], _noop)

        assert engine.has_feature("ts", "b") is False
        assert engine.pending_features("ts") == frozenset({"a"})

    def test_pending_feature_activates_once_dependency_arrives(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "b", ["a"], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"a", "b"})
        assert engine.pending_features("ts") == frozenset()
        assert engine.factory("ts", "b").dependencies == {"a": engine.factory("ts", "a")}

    def test_pending_definition_waits_for_every_dependency(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "c", ["a", "b"], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.has_feature("ts", "c") is False

        engine.register_target_implementation("ts", "b", [], _noop)

        assert engine.has_feature("ts", "c") is True
        assert engine.pending_features("ts") == frozenset()

    def test_dependencies_on_other_targets_do_not_count(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("py", "a", [], _noop)
        engine.register_target_implementation("ts", "b", ["a"], _noop)

        assert engine.has_feature("ts", "b") is False

    def test_enum_members_are_normalized(self, test_settings) -> None:
        engine = ResolutionEngine(["python3"], settings=test_settings)

        engine.register_target_implementation("python3", FeatureName.evaluate_any_sync, [], _noop)

        assert engine.has_feature("python3", "evaluate/any/sync") is True
        assert engine.has_feature("python3", FeatureName.evaluate_any_sync) is True
        assert "evaluate/any/sync" in engine.satisfied_features("python3")

    def test_duplicate_dependencies_are_collapsed(self, engine: ResolutionEngine) -> None:
        definition = engine.register_target_implementation("ts", "b", ["a", "a"], _noop)

        assert definition is not None
        assert definition.dependencies == ("a",)


class TestRegistrationGuards:
    def test_self_dependency_is_rejected_and_logged(self, engine: ResolutionEngine, caplog) -> None:
        caplog.set_level(logging.ERROR, logger="featureweave.resolution.engine")

        result = engine.register_target_implementation("ts", "a", ["a"], _noop)

        assert result is None
        assert engine.has_feature("ts", "a") is False
        assert engine.pending_features("ts") == frozenset()
        assert "cannot depend on itself" in caplog.text

    def test_universal_self_dependency_is_rejected(self, engine: ResolutionEngine) -> None:
        assert engine.register_universal_implementation("a", ["b", "a"], _noop) is None

        engine.register_target_implementation("ts", "b", [], _noop)

        assert engine.has_feature("ts", "a") is False

    def test_unknown_target_is_rejected_and_logged(self, engine: ResolutionEngine, caplog) -> None:
        caplog.set_level(logging.ERROR, logger="featureweave.resolution.engine")

        result = engine.register_target_implementation("rust", "a", [], _noop)

        assert result is None
        assert engine.targets == ("ts", "py")
        assert "Unknown target: 'rust'" in caplog.text

    def test_strict_mode_raises_self_dependency(self, test_settings) -> None:
        engine = ResolutionEngine(["ts"], strict=True, settings=test_settings)

        with pytest.raises(SelfDependencyError) as exc_info:
            engine.register_target_implementation("ts", "a", ["a"], _noop)

        assert exc_info.value.feature == "a"

    def test_strict_mode_raises_unknown_target(self, test_settings) -> None:
        engine = ResolutionEngine(["ts"], strict=True, settings=test_settings)

        with pytest.raises(UnknownTargetError):
            engine.register_target_implementation("rust", "a", [], _noop)

    def test_rejection_does_not_affect_later_registrations(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "a", ["a"], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.has_feature("ts", "a") is True


class TestCascading:
    @pytest.mark.parametrize("order", [("a", "b", "c"), ("c", "b", "a"), ("b", "c", "a")])
    def test_chain_resolves_in_any_order(self, engine: ResolutionEngine, order) -> None:
        dependencies = {"a": [], "b": ["a"], "c": ["b"]}
        for feature in order:
            engine.register_target_implementation("ts", feature, dependencies[feature], _noop)

        assert engine.satisfied_features("ts") == frozenset({"a", "b", "c"})

    def test_cascade_fans_out_to_every_waiting_definition(self, engine: ResolutionEngine) -> None:
        for feature in ("b", "c", "d"):
            engine.register_target_implementation("ts", feature, ["a"], _noop)

        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"a", "b", "c", "d"})

    def test_cascade_reaches_universal_definitions(self, engine: ResolutionEngine) -> None:
        engine.register_universal_implementation("c", ["b"], _noop)
        engine.register_target_implementation("ts", "b", ["a"], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"a", "b", "c"})
        assert engine.satisfied_features("py") == frozenset()

    def test_long_chain(self, engine: ResolutionEngine) -> None:
        for i in reversed(range(1, 200)):
            engine.register_target_implementation("ts", f"f{i}", [f"f{i - 1}"], _noop)
        engine.register_target_implementation("ts", "f0", [], _noop)

        assert len(engine.satisfied_features("ts")) == 200


class TestCycles:
    def test_two_feature_cycle_stays_unsatisfied(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "a", ["b"], _noop)
        engine.register_target_implementation("ts", "b", ["a"], _noop)

        assert engine.has_feature("ts", "a") is False
        assert engine.has_feature("ts", "b") is False
        assert engine.pending_features("ts") == frozenset({"a", "b"})

    def test_cycle_with_external_entry_point_resolves_from_the_entry(self, engine: ResolutionEngine) -> None:
        # a <- b <- a, but a also has a dependency-free implementation
        engine.register_target_implementation("ts", "a", ["b"], _noop)
        engine.register_target_implementation("ts", "b", ["a"], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"a", "b"})

    def test_universal_cycle_terminates(self, engine: ResolutionEngine) -> None:
        engine.register_universal_implementation("x", ["y"], _noop)
        engine.register_universal_implementation("y", ["x"], _noop)
        engine.register_target_implementation("ts", "x", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"x", "y"})
        assert engine.satisfied_features("py") == frozenset()

    def test_three_feature_cycle_stays_unsatisfied(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "a", ["c"], _noop)
        engine.register_target_implementation("ts", "b", ["a"], _noop)
        engine.register_target_implementation("ts", "c", ["b"], _noop)
        engine.register_target_implementation("ts", "d", [], _noop)

        assert engine.satisfied_features("ts") == frozenset({"d"})


class TestUniversalRegistration:
    def test_universal_without_dependencies_reaches_every_target(self, engine: ResolutionEngine) -> None:
        engine.register_universal_implementation("repl/instanced", [], _noop)

        assert engine.targets_with_features(["repl/instanced"]) == ["ts", "py"]

    def test_universal_only_reaches_targets_meeting_dependencies(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("py", "a", [], _noop)
        engine.register_universal_implementation("b", ["a"], _noop)

        assert engine.has_feature("py", "b") is True
        assert engine.has_feature("ts", "b") is False

    def test_universal_offered_to_targets_that_satisfy_later(self, engine: ResolutionEngine) -> None:
        engine.register_universal_implementation("b", ["a"], _noop)

        engine.register_target_implementation("ts", "a", [], _noop)
        assert engine.targets_with_features(["b"]) == ["ts"]

        engine.register_target_implementation("py", "a", [], _noop)
        assert engine.targets_with_features(["b"]) == ["ts", "py"]

    def test_target_specific_implementation_is_not_replaced(self, engine: ResolutionEngine, recorder) -> None:
        specific = engine.register_target_implementation("ts", "f", [], recorder("ts-f"))
        universal = engine.register_universal_implementation("f", [], recorder("universal-f"))

        assert engine.factory("ts", "f")._factory is specific.factory
        assert engine.factory("py", "f")._factory is universal.factory
        assert recorder.calls == []

    def test_first_universal_implementation_wins(self, engine: ResolutionEngine) -> None:
        first = engine.register_universal_implementation("f", [], _noop)
        engine.register_universal_implementation("f", [], _noop)

        assert first is not None
        assert engine.factory("ts", "f")._factory is first.factory


class TestOrderIndependence:
    REGISTRATIONS = [
        ("ts", "a", []),
        ("ts", "b", ["a"]),
        (None, "c", ["b"]),
        (None, "d", ["c", "e"]),
        ("py", "e", []),
        ("py", "b", ["e"]),
        (None, "e", ["a"]),
        ("ts", "x", ["y"]),
        ("ts", "y", ["x"]),
    ]

    @staticmethod
    def _apply(registrations, settings) -> ResolutionEngine:
        engine = ResolutionEngine(["ts", "py"], settings=settings)
        for target, feature, deps in registrations:
            if target is None:
                engine.register_universal_implementation(feature, deps, _noop)
            else:
                engine.register_target_implementation(target, feature, deps, _noop)
        return engine

    def test_every_permutation_reaches_the_same_satisfied_sets(self, test_settings) -> None:
        expected = self._apply(self.REGISTRATIONS, test_settings).snapshot().satisfied

        assert expected == {
            "ts": ["a", "b", "c", "d", "e"],
            "py": ["b", "c", "d", "e"],
        }
        for permutation in itertools.islice(itertools.permutations(self.REGISTRATIONS), 0, None, 97):
            assert self._apply(permutation, test_settings).snapshot().satisfied == expected


class TestExampleScenarios:
    def test_universal_then_target_specific_keeps_universal(self, engine: ResolutionEngine) -> None:
        universal = engine.register_universal_implementation("repl/instanced", [], _noop)

        assert engine.has_feature("ts", "repl/instanced") is True
        assert engine.has_feature("py", "repl/instanced") is True

        async def ts_repl(deps):
            return "ts"

        engine.register_target_implementation("ts", "repl/instanced", [], ts_repl)

        assert engine.factory("ts", "repl/instanced")._factory is universal.factory
        assert engine.factory("py", "repl/instanced")._factory is universal.factory

    def test_second_registration_of_same_feature_is_ignored(self, engine: ResolutionEngine) -> None:
        first = engine.register_target_implementation("ts", "a", [], _noop)

        async def other(deps):
            return "other"

        engine.register_target_implementation("ts", "a", [], other)

        assert engine.factory("ts", "a")._factory is first.factory


class TestQueries:
    def test_satisfies_checks_every_feature(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "a", [], _noop)
        engine.register_target_implementation("ts", "b", [], _noop)

        assert engine.satisfies("ts", ["a", "b"]) is True
        assert engine.satisfies("ts", ["a", "c"]) is False
        assert engine.satisfies("ts", []) is True

    def test_queries_on_unknown_target(self, engine: ResolutionEngine) -> None:
        assert engine.satisfies("rust", []) is False
        assert engine.has_feature("rust", "a") is False
        assert engine.factory("rust", "a") is None
        assert engine.has_target("rust") is False
        with pytest.raises(UnknownTargetError):
            engine.satisfied_features("rust")
        with pytest.raises(UnknownTargetError):
            engine.pending_features("rust")

    def test_targets_are_deduplicated_in_order(self, test_settings) -> None:
        engine = ResolutionEngine(["py", "ts", "py"], settings=test_settings)

        assert engine.targets == ("py", "ts")

    def test_snapshot_model(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "b", [], _noop)
        engine.register_target_implementation("ts", "a", [], _noop)
        engine.register_target_implementation("py", "c", ["missing"], _noop)

        snapshot = engine.snapshot()

        assert isinstance(snapshot, EngineSnapshot)
        assert snapshot.satisfied == {"ts": ["a", "b"], "py": []}
        assert snapshot.pending == {"ts": [], "py": ["missing"]}
        assert snapshot.model_dump()["satisfied"]["ts"] == ["a", "b"]

    def test_satisfied_features_is_a_copy(self, engine: ResolutionEngine) -> None:
        engine.register_target_implementation("ts", "a", [], _noop)

        features = engine.satisfied_features("ts")
        engine.register_target_implementation("ts", "b", [], _noop)

        assert features == frozenset({"a"})
