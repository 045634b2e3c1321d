"""
Evaluation mode selector
"""

from enum import Enum


class EvaluationMode(str, Enum):
    """Selectable rule evaluation semantics"""
    LEGACY = "legacy"
    FULL = "full"
