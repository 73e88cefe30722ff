"""
pytest fixtures for doubletake.

Usage (in a conftest.py)::

    from doubletake.pytest_plugin import doubletake_space  # noqa: F401

    def test_sends_once(doubletake_space):
        doubletake_space.register(mailer, "send", Double.mock("send"))
        mailer.send()

The space is verified when the test body finishes and reset afterwards, so
unmet expectations fail the test at teardown and subjects are always
restored.
"""

from typing import Generator

import pytest

from doubletake.config import EngineConfig
from doubletake.space import Space, space_scope


@pytest.fixture
def doubletake_config() -> EngineConfig:
    """Configuration for :func:`doubletake_space`; override to customize."""
    return EngineConfig.from_env()


@pytest.fixture
def doubletake_space(doubletake_config: EngineConfig) -> Generator[Space, None, None]:
    """A fresh space per test, verified and reset at teardown."""
    with space_scope(config=doubletake_config) as space:
        yield space
