import pytest

from doubletake.pytest_plugin import doubletake_config, doubletake_space  # noqa: F401
from doubletake.space import Space


class Mailer:
    """Subject used throughout the tests."""

    greeting = "hello"

    def send(self, to, body="", *, urgent=False):
        return f"sent {body} to {to}"

    def ping(self):
        return "pong"

    def log(self, *lines):
        return len(lines)

    def each(self, callback):
        callback("real")
        return "each"

    @classmethod
    def build(cls, name):
        return f"built {name}"

    @staticmethod
    def version():
        return "1.0"


@pytest.fixture
def mailer():
    return Mailer()


@pytest.fixture
def space():
    space = Space()
    yield space
    space.reset_all()
