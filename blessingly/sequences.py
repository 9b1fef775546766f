"""Sub-module providing attribute sequences and sequence-aware measurement of text."""
# std imports
import re

# 3rd party
from wcwidth import wcwidth

# local
from .styles import COLORS, StyleSpec

#: Resets all video attributes, ``sgr0``.
NORMAL = '\x1b[m'

#: Sets the bold attribute, ``bold``.
BOLD = '\x1b[1m'

#: Erases the entire screen without moving the cursor, ``ED 2``.
CLEAR_SCREEN = '\x1b[2J'

# grey is "bright black", color index 8, which is outside of the 30-37 and
# 40-47 ranges and is addressed by the aixterm 90-97 and 100-107 ranges.
_FOREGROUND_BASE, _FOREGROUND_BRIGHT_BASE = 30, 90
_BACKGROUND_BASE, _BACKGROUND_BRIGHT_BASE = 40, 100

# CSI sequences, character set designations, and OSC strings terminated by BEL
# or ST, which together cover every sequence emitted by this package and its
# drivers.
_RE_SEQUENCE = re.compile(
    r'\x1b\[[0-9;:?<=>]*[ -/]*[@-~]'
    r'|\x1b[()][0-9A-Za-z]'
    r'|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)'
    r'|\x1b[78=>]'
)


def _color_sequence(name: str, base: int, bright_base: int) -> str:
    idx = COLORS.index(name)
    if idx < 8:
        return f'\x1b[{base + idx}m'
    return f'\x1b[{bright_base + idx - 8}m'


def foreground(name: str) -> str:
    """
    Return the sequence setting the foreground color ``name``.

    :arg str name: one of :data:`~.styles.COLORS`.
    :rtype: str
    """
    return _color_sequence(name, _FOREGROUND_BASE, _FOREGROUND_BRIGHT_BASE)


def background(name: str) -> str:
    """
    Return the sequence setting the background color ``name``.

    :arg str name: one of :data:`~.styles.COLORS`.
    :rtype: str
    """
    return _color_sequence(name, _BACKGROUND_BASE, _BACKGROUND_BRIGHT_BASE)


def attributes(spec: StyleSpec) -> str:
    """
    Return the sequences applying every attribute of ``spec``.

    Attributes are emitted in specification order: bold, foreground, background.

    >>> attributes(StyleSpec(bold=True, foreground='red', background='black'))
    '\\x1b[1m\\x1b[31m\\x1b[40m'
    """
    seqs = [BOLD] if spec.bold else []
    if spec.foreground:
        seqs.append(foreground(spec.foreground))
    if spec.background:
        seqs.append(background(spec.background))
    return ''.join(seqs)


def strip_seqs(text: str) -> str:
    r"""
    Return ``text`` stripped of its terminal sequences.

    >>> strip_seqs('\x1b[1m\x1b[31mxyz\x1b[m')
    'xyz'
    """
    return _RE_SEQUENCE.sub('', text)


def length(text: str) -> int:
    """
    Return the number of character cells ``text`` occupies when printed.

    Sequences occupy no cells, wide East Asian characters occupy two, and
    other non-printable characters occupy none.

    :arg str text: String to measure. May contain terminal sequences.
    :rtype: int
    """
    return sum(max(wcwidth(char), 0) for char in strip_seqs(text))
