"""
Rule evaluation strategies

Two incompatible semantics exist for walking a flag's rules:

- legacy: only the first attribute in the context is consulted, and the
  first condition anywhere in the rule list that reads it decides.
- full: every rule's segment is evaluated in order under its matching
  policy; the walk stops at the first segment that does not match.

Both share the same top-level gates (absent rules, disabled flag).
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union

from ..errors import MalformedFlagError
from ..matching import SegmentEvaluator
from ..models.flag import Flag, Rule, Segment
from ..models.mode import EvaluationMode
from ..models.response import ReasonCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationOutcome:
    """Decision reached by a strategy, built once per exit path"""
    match: bool
    reason: ReasonCode
    segment: Optional[str] = None
    condition: Optional[Union[str, List[Optional[str]]]] = None


class EvaluationStrategy:
    """Base strategy: top-level gates, then mode-specific rule walking"""

    mode: EvaluationMode

    def __init__(self, segment_evaluator: Optional[SegmentEvaluator] = None):
        self.segment_evaluator = segment_evaluator or SegmentEvaluator()

    def evaluate(self, flag: Flag, context: Mapping[str, str]) -> EvaluationOutcome:
        if flag.rules is None:
            return EvaluationOutcome(match=flag.status, reason=ReasonCode.RULE_NOT_FOUND)

        if not flag.status:
            return EvaluationOutcome(match=False, reason=ReasonCode.FLAG_DISABLED)

        return self.evaluate_rules(flag.rules, context)

    def evaluate_rules(self, rules: List[Rule], context: Mapping[str, str]) -> EvaluationOutcome:
        raise NotImplementedError


def _segment_of(rule: Rule) -> Segment:
    if rule.segment is None:
        raise MalformedFlagError("Rule has no segment")
    return rule.segment


class LegacyStrategy(EvaluationStrategy):
    """First context attribute only, first referencing condition wins"""

    mode = EvaluationMode.LEGACY

    def evaluate_rules(self, rules: List[Rule], context: Mapping[str, str]) -> EvaluationOutcome:
        attribute = next(iter(context), None)
        if attribute is None:
            return EvaluationOutcome(match=False, reason=ReasonCode.NO_MATCHING_CONDITION)

        context_value = context[attribute]
        matcher = self.segment_evaluator.matcher

        for rule in rules:
            segment = _segment_of(rule)
            for condition in segment.conditions or []:
                if condition.context != attribute:
                    continue
                return EvaluationOutcome(
                    match=matcher.matches(condition, context_value),
                    reason=ReasonCode.FLAG_MATCH,
                    segment=segment.key,
                    condition=condition.key,
                )

        logger.debug(f"No condition references context attribute {attribute}")
        return EvaluationOutcome(match=False, reason=ReasonCode.NO_MATCHING_CONDITION)


class FullStrategy(EvaluationStrategy):
    """
    Evaluate every rule's segment in declaration order

    Rules chain as a sequential AND: the first non-matching segment stops
    the walk and its result is reported; otherwise the last rule's result
    is reported.
    """

    mode = EvaluationMode.FULL

    def evaluate_rules(self, rules: List[Rule], context: Mapping[str, str]) -> EvaluationOutcome:
        outcome = EvaluationOutcome(match=False, reason=ReasonCode.NO_MATCHING_CONDITION)

        for rule in rules:
            segment = _segment_of(rule)
            result = self.segment_evaluator.evaluate(segment.conditions, context, segment.requires_all)
            outcome = EvaluationOutcome(
                match=result.is_match,
                reason=result.reason,
                segment=segment.key,
                condition=result.key,
            )
            if not result.is_match:
                break

        return outcome


_STRATEGIES: Dict[EvaluationMode, type] = {
    EvaluationMode.LEGACY: LegacyStrategy,
    EvaluationMode.FULL: FullStrategy,
}


def get_strategy(
    mode: Union[EvaluationMode, str],
    segment_evaluator: Optional[SegmentEvaluator] = None
) -> EvaluationStrategy:
    """
    Resolve the strategy for an evaluation mode

    Raises:
        ValueError: Unknown mode
    """
    strategy_class = _STRATEGIES[EvaluationMode(mode)]
    return strategy_class(segment_evaluator)
