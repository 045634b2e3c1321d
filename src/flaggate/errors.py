"""
Evaluation error types

These never cross FlagEvaluator.evaluate; the response builder converts
them into a GenericError response.
"""


class FlagEvaluationError(Exception):
    """Base class for evaluation failures"""
    pass


class MalformedFlagError(FlagEvaluationError):
    """Raised when a flag definition cannot be evaluated as shaped"""
    pass
