"""
Rule evaluation strategies and the never-raising evaluation engine
"""

from .strategies import (
    EvaluationMode,
    EvaluationOutcome,
    EvaluationStrategy,
    LegacyStrategy,
    FullStrategy,
    get_strategy,
)
from .engine import FlagEvaluator, get_flag_evaluator, evaluate

__all__ = [
    'EvaluationMode',
    'EvaluationOutcome',
    'EvaluationStrategy',
    'LegacyStrategy',
    'FullStrategy',
    'get_strategy',
    'FlagEvaluator',
    'get_flag_evaluator',
    'evaluate',
]
