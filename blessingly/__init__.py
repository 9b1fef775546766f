"""
Readable text styling and scope-bound terminal state, in the manner of blessings.

    >>> from blessingly import Terminal
    >>> with Terminal() as term:
    ...     term.move_to(0, 0).print(term.style('bold_red_on_black', 'Hello!')).flush()
"""
# local
from blessingly.driver import Driver
from blessingly.errors import (DriverError,
                              TerminalError,
                              TerminalInUse,
                              DriverIoFailure,
                              InvalidStyleSpec,
                              DriverReleaseFailure,
                              UnsupportedStyleMember,
                              DriverAcquisitionFailure)
from blessingly.styles import COLORS, StyleSpec, parse, is_valid
from blessingly.location import LocationGuard
from blessingly.terminal import Terminal
from blessingly.formatters import StyledText

__all__ = (
    'Terminal',
    'LocationGuard',
    'StyleSpec',
    'StyledText',
    'COLORS',
    'parse',
    'is_valid',
    'Driver',
    'TerminalError',
    'InvalidStyleSpec',
    'UnsupportedStyleMember',
    'DriverError',
    'DriverAcquisitionFailure',
    'TerminalInUse',
    'DriverIoFailure',
    'DriverReleaseFailure',
)
__version__ = "0.1.0"
