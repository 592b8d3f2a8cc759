import pytest

from osprobe.config import load_rule_table
from osprobe.environment import ClientEnvironment


@pytest.fixture
def rule_table():
    return load_rule_table()


@pytest.fixture
def make_env():
    def _make(**kw):
        return ClientEnvironment.from_dict(kw)
    return _make
