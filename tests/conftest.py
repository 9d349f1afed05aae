import pytest

from scicalc.editor import CalculatorSession
from scicalc.engine import CalculatorEngine
from scicalc.settings import AngleMode, Settings


@pytest.fixture
def engine():
    return CalculatorEngine(Settings(angle_mode=AngleMode.DEG))


@pytest.fixture
def session():
    return CalculatorSession(Settings(angle_mode=AngleMode.DEG))


@pytest.fixture
def type_tokens(session):
    """Append display tokens one by one; '!' goes to the factorial key."""
    def _type(*tokens):
        for token in tokens:
            if token == "!":
                session.append_factorial()
            else:
                session.append(token)
        return session.expression
    return _type
