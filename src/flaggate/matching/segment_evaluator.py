"""
Segment evaluation under an "any" or "all" matching policy
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Union

from ..errors import MalformedFlagError
from ..models.flag import Condition
from ..models.response import ReasonCode
from .condition_matcher import ConditionMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentResult:
    """Outcome of evaluating one segment's conditions"""
    is_match: bool
    key: Optional[Union[str, List[Optional[str]]]]
    reason: ReasonCode


class SegmentEvaluator:
    """Walks a segment's conditions in order with early exit"""

    def __init__(self, matcher: Optional[ConditionMatcher] = None):
        self.matcher = matcher or ConditionMatcher()

    def evaluate(
        self,
        conditions: Optional[Sequence[Condition]],
        context: Mapping[str, str],
        requires_all: bool
    ) -> SegmentResult:
        """
        Evaluate conditions against the context

        "any": the first matching condition wins.
        "all": the first failing condition decides a non-match.

        Running off the end of the list returns is_match=True with every
        condition key and NoMatchingCondition, for both policies. Under
        "any" that means nothing matched; under "all" it means everything
        did. Consumers rely on this shape, so both paths share it.

        Raises:
            MalformedFlagError: conditions is absent
        """
        if conditions is None:
            raise MalformedFlagError("Segment has no condition list")

        if len(conditions) == 0:
            return SegmentResult(is_match=True, key=None, reason=ReasonCode.CONDITION_NOT_FOUND)

        for condition in conditions:
            context_value = context.get(condition.context, '')
            has_match = self.matcher.matches(condition, context_value)

            if not requires_all and has_match:
                return SegmentResult(is_match=True, key=condition.key, reason=ReasonCode.FLAG_MATCH)
            if requires_all and not has_match:
                return SegmentResult(is_match=False, key=condition.key, reason=ReasonCode.FLAG_MATCH)

        return SegmentResult(
            is_match=True,
            key=[condition.key for condition in conditions],
            reason=ReasonCode.NO_MATCHING_CONDITION
        )
