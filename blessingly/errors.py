"""Exceptions raised by :mod:`blessingly`."""


class TerminalError(Exception):
    """Base class of every exception raised by this package."""


class InvalidStyleSpec(TerminalError, ValueError):
    """A style specification does not follow ``[bold_]color[_on_color]``."""


class UnsupportedStyleMember(InvalidStyleSpec):
    """
    A style specification contains a token outside of the grammar.

    .. py:attribute:: token

        The offending token, exactly as it appeared in the specification.
    """

    def __init__(self, token: str, spec: str = '') -> None:
        self.token = token
        self.spec = spec
        msg = f'Unsupported style member {token!r}'
        if spec:
            msg += f' in {spec!r}'
        super().__init__(msg)


class DriverError(TerminalError):
    """Base class of failures reported by a terminal driver."""


class DriverAcquisitionFailure(DriverError):
    """Raw mode, the alternate screen, or a hidden cursor could not be acquired."""


class TerminalInUse(DriverAcquisitionFailure):
    """Another :class:`~.Terminal` already owns the terminal of this process."""


class DriverIoFailure(DriverError):
    """A write, flush, cursor movement or cursor query failed."""


class DriverReleaseFailure(DriverError):
    """A previously acquired terminal mode could not be released."""
