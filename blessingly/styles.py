"""Sub-module providing the style specification grammar ``[bold_]color[_on_color]``."""
# std imports
import collections
from typing import Optional

# local
from .errors import InvalidStyleSpec, UnsupportedStyleMember

#: Modifier that may only lead a specification.
BOLD = 'bold'

#: Separator between the foreground and background colors.
SEPARATOR = 'on'

#: Color names, in order of their ECMA-48 color index.
COLORS = ('black', 'red', 'green', 'yellow', 'blue', 'magenta', 'cyan', 'white', 'grey')


class StyleSpec(collections.namedtuple('StyleSpec', ('bold', 'foreground', 'background'))):
    """
    Parsed style specification.

    .. py:attribute:: bold

        Whether the specification starts with ``bold``.

    .. py:attribute:: foreground

        Name of the foreground color.

    .. py:attribute:: background

        Name of the background color, or ``None``.
    """
    __slots__ = ()

    def __new__(cls, bold: bool = False, foreground: Optional[str] = None,
                background: Optional[str] = None) -> 'StyleSpec':
        return super().__new__(cls, bold, foreground, background)

    def __str__(self) -> str:
        """Return the canonical specification string, ``'bold_red_on_black'``."""
        tokens = [BOLD] if self.bold else []
        if self.foreground:
            tokens.append(self.foreground)
        if self.background:
            tokens.extend((SEPARATOR, self.background))
        return '_'.join(tokens)


def parse(spec: str) -> StyleSpec:
    """
    Parse a style specification into a :class:`StyleSpec`.

    :arg str spec: underscore-separated tokens, such as ``'bold_white_on_blue'``.
    :rtype: StyleSpec
    :raises UnsupportedStyleMember: a token is not ``bold``, a color, or ``on``
        in its proper position.
    :raises InvalidStyleSpec: no foreground color is named, or ``on`` is not
        followed by a color.

    >>> parse('bold_red_on_black')
    StyleSpec(bold=True, foreground='red', background='black')
    >>> parse('cyan')
    StyleSpec(bold=False, foreground='cyan', background=None)
    """
    tokens = spec.split('_')
    bold = tokens[0] == BOLD
    if bold:
        tokens.pop(0)

    if not tokens:
        raise InvalidStyleSpec(f'Style specification {spec!r} names no foreground color')

    foreground, background = tokens.pop(0), None
    if foreground not in COLORS:
        raise UnsupportedStyleMember(foreground, spec)

    if tokens:
        separator = tokens.pop(0)
        if separator != SEPARATOR:
            raise UnsupportedStyleMember(separator, spec)
        if not tokens:
            raise InvalidStyleSpec(f'Style specification {spec!r} has no color after {SEPARATOR!r}')
        background = tokens.pop(0)
        if background not in COLORS:
            raise UnsupportedStyleMember(background, spec)
        if tokens:
            raise UnsupportedStyleMember(tokens[0], spec)

    return StyleSpec(bold=bold, foreground=foreground, background=background)


def is_valid(spec: str) -> bool:
    """Return whether ``spec`` would be accepted by :func:`parse`."""
    try:
        parse(spec)
    except InvalidStyleSpec:
        return False
    return True
