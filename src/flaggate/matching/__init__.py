"""
Condition and segment matching
"""

from .condition_matcher import (
    ConditionMatcher,
    ConditionTrace,
    TraceHook,
    log_condition_trace,
    OPERATOR_TABLES,
)
from .segment_evaluator import SegmentEvaluator, SegmentResult

__all__ = [
    'ConditionMatcher',
    'ConditionTrace',
    'TraceHook',
    'log_condition_trace',
    'OPERATOR_TABLES',
    'SegmentEvaluator',
    'SegmentResult',
]
