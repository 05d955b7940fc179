"""
Unit tests for ApplicationFeatureExecutor ordering and error handling.
"""

import pytest

from apphost.features.executor import ApplicationFeatureExecutor
from apphost.features.interfaces import FeatureState
from apphost.host import ApplicationHost
from apphost.utils.errors import AggregateDisposalError, FeatureInitializationError, ServiceNotFoundError
from resources.tests.helpers.features import (
    AsyncFeature,
    EventRecorder,
    FailingDisposeFeature,
    FailingInitializeFeature,
    FailingValidationFeature,
    FeatureA,
    FeatureB,
    PriorityFeature,
    UnresolvableFeature,
    make_builder,
)


def build_executor(*feature_types, recorder=None):
    recorder = recorder or EventRecorder()
    host = make_builder(*feature_types, recorder=recorder).build()
    return ApplicationFeatureExecutor(host), host, recorder


class TestResolveFeatures:

    def test_no_services_resolves_to_none(self):
        executor = ApplicationFeatureExecutor(ApplicationHost())

        assert executor.resolve_features() is None

    def test_priority_features_come_first_in_stable_order(self):
        executor, _, _ = build_executor(FeatureA, PriorityFeature, FeatureB)

        features = executor.resolve_features()

        assert [type(f) for f in features] == [PriorityFeature, FeatureA, FeatureB]

    def test_features_are_singletons(self):
        executor, host, _ = build_executor(FeatureA)

        assert executor.resolve_features()[0] is host.services.container.get(FeatureA)

    def test_requires_host(self):
        with pytest.raises(ValueError):
            ApplicationFeatureExecutor(None)


class TestInitialize:

    @pytest.mark.asyncio
    async def test_no_services_is_a_no_op(self):
        await ApplicationFeatureExecutor(ApplicationHost()).initialize()

    @pytest.mark.asyncio
    async def test_validates_all_before_initializing_any(self):
        executor, _, recorder = build_executor(FeatureA, FeatureB, PriorityFeature)

        await executor.initialize()

        assert recorder.events == [
            "PriorityFeature.validate",
            "FeatureA.validate",
            "FeatureB.validate",
            "PriorityFeature.initialize",
            "FeatureA.initialize",
            "FeatureB.initialize",
        ]

    @pytest.mark.asyncio
    async def test_states_move_through_initializing(self):
        executor, _, _ = build_executor(FeatureA)

        await executor.initialize()

        feature = executor.resolve_features()[0]
        assert feature.state_history == [FeatureState.INITIALIZING, FeatureState.INITIALIZED]

    @pytest.mark.asyncio
    async def test_awaits_coroutine_features(self):
        executor, _, recorder = build_executor(AsyncFeature, FeatureA)

        await executor.initialize()

        assert recorder.of("initialize") == ["AsyncFeature", "FeatureA"]
        assert executor.resolve_features()[0].state == FeatureState.INITIALIZED

    @pytest.mark.asyncio
    async def test_first_failure_stops_initialization(self):
        executor, _, recorder = build_executor(FeatureA, FailingInitializeFeature, FeatureB)

        with pytest.raises(FeatureInitializationError) as exc_info:
            await executor.initialize()

        error = exc_info.value
        assert error.feature_name == "FailingInitializeFeature"
        assert error.phase == "initialize"
        assert isinstance(error.__cause__, RuntimeError)
        assert "initialize failed" in str(error)

        feature_a, failing, feature_b = executor.resolve_features()
        assert recorder.of("initialize") == ["FeatureA", "FailingInitializeFeature"]
        assert feature_a.state == FeatureState.INITIALIZED
        assert failing.state == FeatureState.INITIALIZING
        assert feature_b.state == FeatureState.CREATED

    @pytest.mark.asyncio
    async def test_validation_failure_initializes_nothing(self):
        executor, _, recorder = build_executor(FeatureA, FailingValidationFeature)

        with pytest.raises(FeatureInitializationError) as exc_info:
            await executor.initialize()

        assert exc_info.value.phase == "validate_dependencies"
        assert recorder.of("initialize") == []

    @pytest.mark.asyncio
    async def test_unresolvable_feature_fails_start_with_cause(self):
        executor, _, recorder = build_executor(FeatureA, UnresolvableFeature, FeatureB)

        with pytest.raises(FeatureInitializationError) as exc_info:
            await executor.initialize()

        error = exc_info.value
        assert error.feature_name == "UnresolvableFeature"
        assert error.phase == "resolve"
        assert isinstance(error.__cause__, ServiceNotFoundError)
        assert recorder.events == []


class TestDispose:

    @pytest.mark.asyncio
    async def test_disposes_in_reverse_order(self):
        executor, _, recorder = build_executor(FeatureA, FeatureB, PriorityFeature)
        await executor.initialize()

        await executor.dispose()

        assert recorder.of("dispose") == ["FeatureB", "FeatureA", "PriorityFeature"]
        assert all(f.state == FeatureState.DISPOSED for f in executor.resolve_features())

    @pytest.mark.asyncio
    async def test_failures_are_collected_and_every_feature_disposed(self):
        executor, _, recorder = build_executor(FeatureA, FeatureB, FailingDisposeFeature)
        await executor.initialize()

        with pytest.raises(AggregateDisposalError) as exc_info:
            await executor.dispose()

        assert len(exc_info.value.exceptions) == 1
        assert isinstance(exc_info.value.exceptions[0], RuntimeError)
        assert recorder.of("dispose") == ["FailingDisposeFeature", "FeatureB", "FeatureA"]

        feature_a, feature_b, failing = executor.resolve_features()
        assert feature_a.state == FeatureState.DISPOSED
        assert feature_b.state == FeatureState.DISPOSED
        assert failing.state == FeatureState.DISPOSING

    @pytest.mark.asyncio
    async def test_all_failures_are_reported(self):
        class SecondFailing(FailingDisposeFeature):
            pass

        executor, _, recorder = build_executor(FailingDisposeFeature, FeatureA, SecondFailing, FeatureB)
        await executor.initialize()

        with pytest.raises(AggregateDisposalError) as exc_info:
            await executor.dispose()

        assert [str(e) for e in exc_info.value.exceptions] == [
            "SecondFailing dispose failed",
            "FailingDisposeFeature dispose failed",
        ]
        assert recorder.of("dispose") == ["FeatureB", "SecondFailing", "FeatureA", "FailingDisposeFeature"]

        failing, feature_a, second_failing, feature_b = executor.resolve_features()
        assert feature_a.state == FeatureState.DISPOSED
        assert feature_b.state == FeatureState.DISPOSED
        assert failing.state == FeatureState.DISPOSING
        assert second_failing.state == FeatureState.DISPOSING

    @pytest.mark.asyncio
    async def test_unresolvable_feature_is_skipped_and_reported(self):
        executor, _, recorder = build_executor(FeatureA, UnresolvableFeature, FeatureB)

        with pytest.raises(AggregateDisposalError) as exc_info:
            await executor.dispose()

        assert len(exc_info.value.exceptions) == 1
        assert isinstance(exc_info.value.exceptions[0], ServiceNotFoundError)
        assert recorder.of("dispose") == ["FeatureB", "FeatureA"]
