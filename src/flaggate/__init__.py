"""
flaggate - runtime feature-flag rule evaluation

Evaluates a flag definition (status plus ordered rules of typed
conditions) against a request-time attribute map and explains the
outcome with a closed diagnostic code.
"""

from .models import (
    Condition,
    ConditionType,
    Flag,
    MatchingPolicy,
    Rule,
    Segment,
    EvaluationMode,
    EvaluateMeta,
    EvaluateResponse,
    ReasonCode,
)
from .evaluation import FlagEvaluator, get_flag_evaluator, evaluate
from .config import EvaluatorConfig

__version__ = "1.0.0"

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
    'FlagEvaluator',
    'get_flag_evaluator',
    'evaluate',
    'EvaluatorConfig',
]
