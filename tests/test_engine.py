"""
Tests for the never-raising evaluation engine
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

import flaggate
from flaggate.clock import DeterministicClock, get_clock, set_clock
from flaggate.config import EvaluatorConfig
from flaggate.evaluation import FlagEvaluator, get_flag_evaluator
from flaggate.models import EvaluateResponse, EvaluationMode, ReasonCode

from factories import make_condition, make_flag, make_flag_payload, make_segment

ULID_PATTERN = re.compile(r'^[0123456789ABCDEFGHJKMNPQRSTVWXYZ]{26}$')


class TestResponseEnvelope:
    """Every exit path produces a fully populated response"""

    def test_match_response(self, evaluator):
        response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "corr-1", EvaluationMode.FULL)

        assert isinstance(response, EvaluateResponse)
        assert response.match is True
        assert response.reason == ReasonCode.FLAG_MATCH
        assert response.meta.segment == "us-users"
        assert response.meta.condition == "country-us"
        assert response.correlation_id == "corr-1"
        assert ULID_PATTERN.match(response.response_id)
        assert response.time >= 0.0

    @pytest.mark.parametrize("flag,expected_reason", [
        (make_flag(segments=None, status=True), ReasonCode.RULE_NOT_FOUND),
        (make_flag(segments=[make_segment(conditions=[make_condition()])], status=False), ReasonCode.FLAG_DISABLED),
    ])
    def test_gates_are_fully_populated(self, evaluator, flag, expected_reason):
        response = evaluator.evaluate(flag, {"country": "US"}, "corr-gate")
        assert response.reason == expected_reason
        assert response.correlation_id == "corr-gate"
        assert ULID_PATTERN.match(response.response_id)

    def test_rules_absent_returns_status_for_any_context(self, evaluator):
        for context in ({}, {"country": "US"}, {"anything": "else"}):
            response = evaluator.evaluate(make_flag(segments=None, status=True), context, "c")
            assert response.match is True
            assert response.reason == ReasonCode.RULE_NOT_FOUND

    def test_disabled_flag_never_matches(self, evaluator):
        flag = make_flag(segments=[make_segment(conditions=[])], status=False)
        for mode in EvaluationMode:
            response = evaluator.evaluate(flag, {"country": "US"}, "c", mode)
            assert response.match is False
            assert response.reason == ReasonCode.FLAG_DISABLED

    def test_response_ids_are_fresh(self, evaluator):
        first = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c")
        second = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c")
        assert first.response_id != second.response_id

    def test_wire_shape_uses_camel_case(self, evaluator):
        wire = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "corr-9").to_wire()
        assert set(wire) == {"match", "meta", "reason", "time", "correlationId", "responseId"}
        assert wire["reason"] == "FlagMatch"
        assert wire["meta"] == {"segment": "us-users", "condition": "country-us"}


class TestGenericError:
    """Unexpected failures become GenericError, never exceptions"""

    @pytest.mark.parametrize("flag", [
        {"rules": []},
        {"status": True, "rules": "nope"},
        {"status": True, "rules": [{"segment": {"key": "s", "conditions": "nope"}}]},
        "not a flag",
        None,
    ])
    def test_malformed_flag_shape(self, evaluator, flag):
        response = evaluator.evaluate(flag, {"country": "US"}, "corr-err")
        assert response.match is False
        assert response.reason == ReasonCode.GENERIC_ERROR
        assert response.correlation_id == "corr-err"
        assert ULID_PATTERN.match(response.response_id)

    @pytest.mark.parametrize("mode", list(EvaluationMode))
    def test_rule_without_segment(self, evaluator, mode):
        flag = {"status": True, "rules": [{}]}
        assert evaluator.evaluate(flag, {"country": "US"}, "c", mode).reason == ReasonCode.GENERIC_ERROR

    def test_full_mode_segment_without_conditions(self, evaluator):
        flag = {"status": True, "rules": [{"segment": {"key": "bare"}}]}
        assert evaluator.evaluate(flag, {}, "c", "full").reason == ReasonCode.GENERIC_ERROR
        assert evaluator.evaluate(flag, {"a": "b"}, "c", "legacy").reason == ReasonCode.NO_MATCHING_CONDITION

    def test_unknown_mode(self, evaluator):
        response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c", "v3")
        assert response.reason == ReasonCode.GENERIC_ERROR

    def test_non_mapping_context(self, evaluator):
        response = evaluator.evaluate(make_flag_payload(), ["country", "US"], "c")
        assert response.reason == ReasonCode.GENERIC_ERROR

    def test_strategy_failure_is_logged_and_contained(self, evaluator, caplog):
        strategy = evaluator._strategies[EvaluationMode.FULL]
        with patch.object(strategy, 'evaluate', side_effect=RuntimeError("boom")):
            with caplog.at_level(logging.ERROR):
                response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "corr-boom")
        assert response.reason == ReasonCode.GENERIC_ERROR
        assert response.meta.segment is None
        assert "corr-boom" in caplog.text


class TestIncompleteConditions:
    """Conditions missing fields only fail themselves, never the whole flag"""

    @pytest.mark.parametrize("mode", list(EvaluationMode))
    def test_disabled_flag_with_incomplete_condition(self, evaluator, mode):
        flag = {"status": False, "rules": [{"segment": {"key": "s", "conditions": [
            {"key": "c", "context": "country", "conditionType": "string", "value": "US"},
        ]}}]}
        response = evaluator.evaluate(flag, {"country": "US"}, "corr-off", mode)
        assert response.match is False
        assert response.reason == ReasonCode.FLAG_DISABLED

    def test_disabled_flag_with_bare_rule(self, evaluator):
        flag = {"status": False, "rules": [{}]}
        assert evaluator.evaluate(flag, {"country": "US"}, "c").reason == ReasonCode.FLAG_DISABLED

    def test_any_segment_matches_before_incomplete_condition(self, evaluator):
        flag = {"status": True, "rules": [{"segment": {"key": "s", "conditions": [
            {"key": "is-us", "context": "country", "conditionType": "string", "operator": "equals", "value": "US"},
            {"key": "no-op", "context": "country", "conditionType": "string", "value": "US"},
        ]}}]}
        response = evaluator.evaluate(flag, {"country": "US"}, "c", "full")
        assert response.match is True
        assert response.reason == ReasonCode.FLAG_MATCH
        assert response.meta.condition == "is-us"

    def test_all_segment_fails_on_incomplete_condition(self, evaluator):
        flag = {"status": True, "rules": [{"segment": {"key": "s", "matching": "all", "conditions": [
            {"key": "is-us", "context": "country", "conditionType": "string", "operator": "equals", "value": "US"},
            {"key": "untyped", "context": "country", "operator": "equals", "value": "US"},
        ]}}]}
        response = evaluator.evaluate(flag, {"country": "US"}, "c", "full")
        assert response.match is False
        assert response.meta.condition == "untyped"

    def test_keyless_conditions_in_fallthrough(self, evaluator):
        flag = {"status": True, "rules": [{"segment": {"key": "s", "conditions": [
            {"context": "country", "conditionType": "string", "operator": "equals", "value": "CA"},
        ]}}]}
        response = evaluator.evaluate(flag, {"country": "US"}, "c", "full")
        assert response.reason == ReasonCode.NO_MATCHING_CONDITION
        assert response.meta.condition == [None]
        assert response.to_wire()["meta"]["condition"] == [None]


class TestTiming:

    def test_elapsed_time_from_clock(self):
        clock = DeterministicClock()
        evaluator = FlagEvaluator(clock=clock, config=EvaluatorConfig())
        strategy = evaluator._strategies[EvaluationMode.FULL]
        original = strategy.evaluate

        def slow_evaluate(flag, context):
            clock.advance(12.5)
            return original(flag, context)

        with patch.object(strategy, 'evaluate', side_effect=slow_evaluate):
            response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c")

        assert response.time == 12.5
        assert response.match is True

    def test_elapsed_time_never_negative(self):
        clock = DeterministicClock()
        evaluator = FlagEvaluator(clock=clock, config=EvaluatorConfig())
        strategy = evaluator._strategies[EvaluationMode.FULL]

        with patch.object(strategy, 'evaluate', side_effect=lambda f, c: clock.advance(-5)):
            response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c")

        assert response.time == 0.0

    def test_global_clock_is_used_by_default(self):
        clock = DeterministicClock()
        previous = get_clock()
        set_clock(clock)
        try:
            evaluator = FlagEvaluator(config=EvaluatorConfig())
        finally:
            set_clock(previous)
        assert evaluator.clock is clock

    def test_generic_error_is_timed(self):
        clock = DeterministicClock()
        evaluator = FlagEvaluator(clock=clock, config=EvaluatorConfig())
        strategy = evaluator._strategies[EvaluationMode.FULL]

        def failing(flag, context):
            clock.advance(3)
            raise KeyError("segment")

        with patch.object(strategy, 'evaluate', side_effect=failing):
            response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c")

        assert response.reason == ReasonCode.GENERIC_ERROR
        assert response.time == 3.0


class TestDeterminism:

    @pytest.mark.parametrize("mode", list(EvaluationMode))
    def test_identical_inputs_identical_outcome(self, evaluator, mode):
        flag = make_flag(segments=[
            make_segment(key="seg", matching="all", conditions=[
                make_condition(key="is-us"),
                make_condition(key="signup", context="signup", condition_type="datetime",
                               operator="after", value="Jan 1, 2023"),
            ]),
        ])
        context = {"country": "US", "signup": "2023/06/01"}

        first = evaluator.evaluate(flag, context, "corr-d", mode)
        second = evaluator.evaluate(flag, context, "corr-d", mode)

        assert (first.match, first.meta, first.reason) == (second.match, second.meta, second.reason)
        assert first.outcome_hash() == second.outcome_hash()

    def test_outcome_hash_ignores_time_and_ids(self, evaluator):
        response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "a")
        other = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "b")
        assert response.outcome_hash() == other.outcome_hash()
        assert re.match(r'^[a-f0-9]{64}$', response.outcome_hash())

    def test_concurrent_callers_share_one_evaluator(self, evaluator):
        flag = make_flag(segments=[make_segment(conditions=[make_condition(key="is-us")])])
        contexts = [{"country": "US" if i % 2 else "CA"} for i in range(50)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            responses = list(pool.map(lambda ctx: evaluator.evaluate(flag, ctx, "c", "legacy"), contexts))

        assert [r.match for r in responses] == [ctx["country"] == "US" for ctx in contexts]

    def test_inputs_are_not_mutated(self, evaluator):
        payload = make_flag_payload()
        context = {"country": "US", "plan": "pro"}
        snapshot = (repr(payload), repr(context))

        evaluator.evaluate(payload, context, "c", "full")
        evaluator.evaluate(payload, context, "c", "legacy")

        assert (repr(payload), repr(context)) == snapshot


class TestModeSelection:

    def test_default_mode_from_config(self, clock):
        flag = make_flag(segments=[
            make_segment(key="pro", conditions=[make_condition(key="is-pro", context="plan", value="pro")]),
        ])
        context = {"country": "US", "plan": "pro"}

        legacy = FlagEvaluator(clock=clock, config=EvaluatorConfig(default_mode=EvaluationMode.LEGACY))
        full = FlagEvaluator(clock=clock, config=EvaluatorConfig(default_mode=EvaluationMode.FULL))

        assert legacy.evaluate(flag, context, "c").reason == ReasonCode.NO_MATCHING_CONDITION
        assert full.evaluate(flag, context, "c").match is True

    def test_mode_accepts_text(self, evaluator):
        response = evaluator.evaluate(make_flag_payload(), {"country": "US"}, "c", "legacy")
        assert response.reason == ReasonCode.FLAG_MATCH


class TestModuleLevelEvaluate:

    def test_global_evaluator_is_reused(self):
        assert get_flag_evaluator() is get_flag_evaluator()

    def test_convenience_function(self):
        response = flaggate.evaluate(make_flag_payload(), {"country": "CA"}, "corr-x", "full")
        assert response.match is True
        assert response.reason == ReasonCode.NO_MATCHING_CONDITION
        assert response.meta.condition == ["country-us"]
        assert response.correlation_id == "corr-x"
