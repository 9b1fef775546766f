# std imports
import os

# 3rd party
import pytest

# local
import blessingly.terminal
from blessingly import COLORS, Terminal
from .accessories import RecordingDriver

all_colors_params = list(COLORS)

if os.environ.get('TEST_QUICK'):
    all_colors_params = ['red', 'grey']


@pytest.fixture(params=all_colors_params)
def all_colors(request):
    """Every color name of the style specification grammar."""
    return request.param


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove environment variables that override styling, and forget open terminals."""
    for name in ('NO_COLOR', 'FORCE_COLOR', 'CLICOLOR_FORCE'):
        monkeypatch.delenv(name, raising=False)
    yield
    blessingly.terminal._TERMINAL_ACTIVE = False


@pytest.fixture
def driver():
    """A recording driver attached to a terminal."""
    return RecordingDriver()


@pytest.fixture
def term(driver):
    """An open, styling Terminal over ``driver``, closed after the test."""
    terminal = Terminal(driver=driver, force_styling=True)
    yield terminal
    terminal.close()
