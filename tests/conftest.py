"""
Pytest configuration and fixtures for flaggate
"""

import pytest

from flaggate.clock import DeterministicClock
from flaggate.config import EvaluatorConfig
from flaggate.evaluation import FlagEvaluator
from flaggate.evaluation import engine


@pytest.fixture(autouse=True)
def isolate_evaluator_environment(monkeypatch, tmp_path):
    """
    Keep evaluator configuration independent of the host.
    Clears FLAGGATE_* variables, points the config file at a missing path
    and resets the global evaluator instance.
    """
    for name in ('FLAGGATE_EVALUATION_MODE', 'FLAGGATE_TRACE_CONDITIONS'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('FLAGGATE_CONFIG', str(tmp_path / 'missing-config.json'))
    monkeypatch.setattr(engine, '_evaluator_instance', None)
    yield


@pytest.fixture
def clock():
    """Deterministic clock for timing assertions"""
    return DeterministicClock()


@pytest.fixture
def evaluator(clock):
    """Evaluator with default configuration and a deterministic clock"""
    return FlagEvaluator(clock=clock, config=EvaluatorConfig())
