"""
Flag evaluation engine

Wraps rule evaluation in a boundary that never raises: every call returns
a fully populated EvaluateResponse with elapsed time, a fresh response id
and the caller's correlation id.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

import ulid

from ..clock import Clock, get_clock
from ..config import EvaluatorConfig
from ..matching import ConditionMatcher, SegmentEvaluator
from ..models.flag import Flag
from ..models.response import EvaluateMeta, EvaluateResponse, ReasonCode
from ..models.mode import EvaluationMode
from .strategies import EvaluationOutcome, EvaluationStrategy, get_strategy

logger = logging.getLogger(__name__)

FlagInput = Union[Flag, Mapping[str, Any]]


class FlagEvaluator:
    """
    Evaluates flag definitions against request contexts.

    Stateless per call: instances hold only configuration and the
    strategy objects, so one evaluator can serve concurrent callers.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        matcher: Optional[ConditionMatcher] = None,
        config: Optional[EvaluatorConfig] = None
    ):
        self.clock = clock or get_clock()
        self.config = config or EvaluatorConfig.load()
        self.matcher = matcher or ConditionMatcher(trace_all=self.config.trace_all_conditions)
        self.segment_evaluator = SegmentEvaluator(self.matcher)
        self._strategies: Dict[EvaluationMode, EvaluationStrategy] = {
            mode: get_strategy(mode, self.segment_evaluator) for mode in EvaluationMode
        }

    def evaluate(
        self,
        flag: FlagInput,
        context: Mapping[str, str],
        correlation_id: Optional[str] = None,
        mode: Optional[Union[EvaluationMode, str]] = None
    ) -> EvaluateResponse:
        """
        Evaluate a flag for one context

        Args:
            flag: Flag model or its stored mapping shape
            context: Attribute name to textual value; key order matters in legacy mode
            correlation_id: Caller id echoed on the response
            mode: Evaluation mode, the configured default when None

        Returns:
            EvaluateResponse; failures are reported as GenericError, never raised
        """
        started_ms = self.clock.monotonic_ms()
        try:
            outcome = self._evaluate(flag, context, mode)
        except Exception:
            logger.exception(f"Flag evaluation failed (correlation_id={correlation_id})")
            outcome = EvaluationOutcome(match=False, reason=ReasonCode.GENERIC_ERROR)

        return self._build_response(outcome, started_ms, correlation_id)

    def _evaluate(
        self,
        flag: FlagInput,
        context: Mapping[str, str],
        mode: Optional[Union[EvaluationMode, str]]
    ) -> EvaluationOutcome:
        if not isinstance(flag, Flag):
            flag = Flag.model_validate(flag)
        if not isinstance(context, Mapping):
            raise TypeError(f"Context must be a mapping, got {type(context).__name__}")

        resolved_mode = self.config.default_mode if mode is None else EvaluationMode(mode)
        outcome = self._strategies[resolved_mode].evaluate(flag, context)

        logger.debug(
            f"Flag {flag.label} evaluated in {resolved_mode.value} mode: "
            f"match={outcome.match} reason={outcome.reason.value}"
        )
        return outcome

    def _build_response(
        self,
        outcome: EvaluationOutcome,
        started_ms: float,
        correlation_id: Optional[str]
    ) -> EvaluateResponse:
        elapsed_ms = max(0.0, self.clock.monotonic_ms() - started_ms)
        return EvaluateResponse(
            match=outcome.match,
            meta=EvaluateMeta(segment=outcome.segment, condition=outcome.condition),
            reason=outcome.reason,
            time=round(elapsed_ms, 3),
            correlation_id=None if correlation_id is None else str(correlation_id),
            response_id=str(ulid.ULID()),
        )


# Global evaluator instance
_evaluator_instance: Optional[FlagEvaluator] = None


def get_flag_evaluator() -> FlagEvaluator:
    """Get the global flag evaluator instance"""
    global _evaluator_instance
    if _evaluator_instance is None:
        _evaluator_instance = FlagEvaluator()
    return _evaluator_instance


def evaluate(
    flag: FlagInput,
    context: Mapping[str, str],
    correlation_id: Optional[str] = None,
    mode: Optional[Union[EvaluationMode, str]] = None
) -> EvaluateResponse:
    """Evaluate a flag with the global evaluator (convenience function)"""
    return get_flag_evaluator().evaluate(flag, context, correlation_id, mode)
