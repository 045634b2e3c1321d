"""
Condition matching

Each condition type owns a table of pure comparison functions keyed by
operator. Every comparison is total: unknown types, unknown operators and
operands that fail to coerce all resolve to False.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..dates import (
    is_same,
    is_before,
    is_before_or_at,
    is_after,
    is_after_or_at,
)
from ..models.flag import Condition, ConditionType

logger = logging.getLogger(__name__)

Comparator = Callable[[str, str], bool]


_DECIMAL = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')
_PREFIXED_INTEGER = re.compile(r'0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)')
_INFINITY = {'Infinity': float('inf'), '+Infinity': float('inf'), '-Infinity': float('-inf')}


def _to_number(text: str) -> Optional[float]:
    """
    Coerce text to a number, None when it is not one

    Accepts decimal and exponent notation, unsigned 0x/0o/0b integers and
    a case-sensitive signed "Infinity". Python-only spellings such as "inf",
    "nan" or "1_000" are not numbers here. Empty text is not a number.
    """
    text = text.strip()
    if text in _INFINITY:
        return _INFINITY[text]
    if _PREFIXED_INTEGER.fullmatch(text):
        try:
            return float(int(text, 0))
        except OverflowError:
            return float('inf')
    if _DECIMAL.fullmatch(text):
        return float(text)
    return None


def _numeric(compare: Callable[[float, float], bool]) -> Comparator:
    def comparator(context_value: str, condition_value: str) -> bool:
        left = _to_number(context_value)
        right = _to_number(condition_value)
        if left is None or right is None:
            return False
        return compare(left, right)
    return comparator


STRING_OPERATORS: Dict[str, Comparator] = {
    'equals': lambda ctx, val: ctx == val,
    'notEquals': lambda ctx, val: ctx != val,
    'startsWith': lambda ctx, val: ctx.startswith(val),
    'endsWith': lambda ctx, val: ctx.endswith(val),
}

# Context value is always the left-hand operand: "before" means the
# context date precedes the condition date.
DATETIME_OPERATORS: Dict[str, Comparator] = {
    'equals': is_same,
    'notEquals': lambda ctx, val: not is_same(ctx, val),
    'before': is_before,
    'beforeOrAt': is_before_or_at,
    'after': is_after,
    'afterOrAt': is_after_or_at,
}

NUMBER_OPERATORS: Dict[str, Comparator] = {
    'equals': _numeric(lambda a, b: a == b),
    'notEquals': _numeric(lambda a, b: a != b),
    'gt': _numeric(lambda a, b: a > b),
    'lt': _numeric(lambda a, b: a < b),
    'lte': _numeric(lambda a, b: a <= b),
    'gte': _numeric(lambda a, b: a >= b),
}

OPERATOR_TABLES: Dict[str, Dict[str, Comparator]] = {
    ConditionType.STRING.value: STRING_OPERATORS,
    ConditionType.DATETIME.value: DATETIME_OPERATORS,
    ConditionType.NUMBER.value: NUMBER_OPERATORS,
}


def _match_boolean(condition: Condition, context_value: Any) -> bool:
    # The operator slot carries the expected boolean text
    if condition.operator is None:
        return False
    return str(condition.operator).lower() == str(context_value).lower()


@dataclass(frozen=True)
class ConditionTrace:
    """What a traced condition saw and decided"""
    condition: Condition
    context_value: Any
    result: bool


TraceHook = Callable[[ConditionTrace], None]


def log_condition_trace(trace: ConditionTrace) -> None:
    """Default trace hook: one INFO line per traced condition"""
    condition = trace.condition
    logger.info(
        f"Condition {condition.key} ({condition.condition_type} {condition.operator} "
        f"{condition.value!r}) against {trace.context_value!r}: {trace.result}"
    )


class ConditionMatcher:
    """Evaluates one condition against one context value"""

    def __init__(self, trace_hook: Optional[TraceHook] = None, trace_all: bool = False):
        self.trace_hook = trace_hook or log_condition_trace
        self.trace_all = trace_all

    def matches(self, condition: Condition, context_value: Any) -> bool:
        """
        Decide whether a context value satisfies a condition

        Args:
            condition: Condition to evaluate
            context_value: Raw context value; None is treated as empty text

        Returns:
            True on match, False otherwise (never raises for bad operands)
        """
        if context_value is None:
            context_value = ''

        result = self._compare(condition, context_value)

        if condition.debug or self.trace_all:
            self._emit(ConditionTrace(condition=condition, context_value=context_value, result=result))

        return result

    def _compare(self, condition: Condition, context_value: Any) -> bool:
        if condition.condition_type == ConditionType.BOOLEAN.value:
            return _match_boolean(condition, context_value)

        table = OPERATOR_TABLES.get(condition.condition_type)
        if table is None:
            return False

        comparator = table.get(condition.operator)
        if comparator is None:
            return False

        return comparator(str(context_value), condition.value or '')

    def _emit(self, trace: ConditionTrace) -> None:
        try:
            self.trace_hook(trace)
        except Exception as e:
            logger.warning(f"Condition trace hook failed for {trace.condition.key}: {e}")
