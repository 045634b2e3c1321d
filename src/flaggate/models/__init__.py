"""
Flag definition and evaluation response models
"""

from .flag import Condition, ConditionType, Flag, MatchingPolicy, Rule, Segment
from .mode import EvaluationMode
from .response import EvaluateMeta, EvaluateResponse, ReasonCode

__all__ = [
    'Condition',
    'ConditionType',
    'Flag',
    'MatchingPolicy',
    'Rule',
    'Segment',
    'EvaluationMode',
    'EvaluateMeta',
    'EvaluateResponse',
    'ReasonCode',
]
