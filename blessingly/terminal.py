# -*- coding: utf-8 -*-
"""Module containing :class:`Terminal`, the primary API entry point."""
# std imports
import os
import platform
import warnings
from typing import IO, Any, List, Tuple, Union, Optional

# local
from .driver import Driver
from .errors import (TerminalInUse,
                     InvalidStyleSpec,
                     DriverAcquisitionFailure)
from .styles import StyleSpec, parse
from .location import LocationGuard
from .sequences import NORMAL, length, attributes, strip_seqs
from .formatters import StyledText, FormattingString, NullCallableString

# isort: off
if platform.system() == 'Windows':
    from .win_driver import TerminalDriver
else:
    from .driver import TerminalDriver  # type: ignore

_TERMINAL_ACTIVE = False  # See comments at end of file


class Terminal():
    """
    Owner of the terminal's display mode, and source of styled text.

    Creating a Terminal enters raw mode, switches to the alternate screen
    buffer, and hides the cursor. Closing it, by leaving its ``with`` block or
    calling :meth:`close`, shows the cursor, returns to the primary screen
    buffer, and leaves raw mode, in that order:

    .. code-block:: python

        with Terminal() as term:
            term.move_to(5, 5).print(term.style('white_on_blue', 'Hi')).flush()

    Only one Terminal may be open in a process at a time.
    """
    # pylint: disable=too-many-instance-attributes

    def __init__(self, kind: Optional[str] = None, stream: Optional[IO[str]] = None,
                 force_styling: Union[bool, None] = False, driver: Optional[Driver] = None,
                 timeout: Optional[float] = None) -> None:
        """
        Initialize the terminal, acquiring raw mode, alternate screen and hidden cursor.

        :arg str kind: A terminal string as taken by :func:`curses.setupterm`.
            Defaults to the value of the ``TERM`` environment variable.
            Ignored when ``driver`` is given.

        :arg file stream: A file-like object representing the Terminal output.
            Defaults to the original value of :obj:`sys.__stdout__`.
            Ignored when ``driver`` is given.

        :arg bool force_styling: Whether to force the emission of attribute
            sequences even if the output stream does not seem to be connected
            to a terminal. If you want to force styling to not happen, use
            ``force_styling=None``.

            When the OS Environment variable FORCE_COLOR_ or CLICOLOR_FORCE_ is
            *non-empty*, styling is used no matter the value specified by
            ``force_styling``.

            Conversely, When OS Environment variable NO_COLOR_ is *non-empty*,
            styling is **not** used no matter the value specified by
            ``force_styling`` and has precedence over FORCE_COLOR_ and
            CLICOLOR_FORCE_.

            .. _FORCE_COLOR: https://force-color.org/
            .. _CLICOLOR_FORCE: https://bixense.com/clicolors/
            .. _NO_COLOR: https://no-color.org/

        :arg Driver driver: The terminal driver to use in place of the default
            :class:`~.driver.TerminalDriver` for this platform.

        :arg float timeout: Seconds the default driver awaits a reply when
            querying the cursor position, indefinitely when ``None``.

        :raises TerminalInUse: another Terminal of this process is still open.
        :raises DriverAcquisitionFailure: a terminal mode could not be acquired.
            Any mode acquired before the failure has already been released.
        """
        # pylint: disable=global-statement
        global _TERMINAL_ACTIVE
        self._closed = True
        self._raw_mode_active = False
        self._alternate_screen_active = False
        self._cursor_hidden = False
        self.errors: List[str] = [
            f'parameters: kind={kind!r}, stream={stream!r}, force_styling={force_styling!r}, '
            f'driver={driver!r}, timeout={timeout!r}',
        ]
        if _TERMINAL_ACTIVE:
            raise TerminalInUse('Another Terminal is open; close it before opening a new one')

        if driver is None:
            driver = TerminalDriver(kind=kind, stream=stream, timeout=timeout)
        self._driver = driver
        self.__init_set_styling(force_styling)
        self.__acquire()
        self._closed = False
        _TERMINAL_ACTIVE = True

    def __init_set_styling(self, force_styling: Union[bool, None]) -> None:
        self._does_styling = False
        is_a_tty = self._driver.is_a_tty
        if os.getenv('NO_COLOR'):
            self.errors.append(f'NO_COLOR={os.getenv("NO_COLOR")!r}')
        elif os.getenv('FORCE_COLOR'):
            self.errors.append(f'FORCE_COLOR={os.getenv("FORCE_COLOR")!r}')
            self._does_styling = True
        elif os.getenv('CLICOLOR_FORCE'):
            self.errors.append(f'CLICOLOR_FORCE={os.getenv("CLICOLOR_FORCE")!r}')
            self._does_styling = True
        elif force_styling is None and is_a_tty:
            self.errors.append('force_styling is None')
        elif force_styling or is_a_tty:
            self._does_styling = True

    def __acquire(self) -> None:
        try:
            self._driver.enter_raw_mode()
            self._raw_mode_active = True
            self._driver.enter_alternate_screen()
            self._alternate_screen_active = True
            self._driver.hide_cursor()
            self._cursor_hidden = True
        except BaseException as err:
            self.errors.append(f'acquisition failed: {err!r}')
            self.__release()
            if isinstance(err, DriverAcquisitionFailure) or not isinstance(err, Exception):
                raise
            raise DriverAcquisitionFailure(f'Failed to acquire terminal: {err}') from err

    def __release(self) -> None:
        # Every step is attempted: a failure is recorded and the next step
        # proceeds. A step is never attempted twice.
        steps = (('_cursor_hidden', self._driver.show_cursor),
                 ('_alternate_screen_active', self._driver.leave_alternate_screen),
                 ('_raw_mode_active', self._driver.leave_raw_mode))
        for flag, release in steps:
            if not getattr(self, flag):
                continue
            setattr(self, flag, False)
            try:
                release()
            except Exception as err:  # pylint: disable=broad-except
                msg = f'Failed to release terminal ({release.__name__}): {err}'
                self.errors.append(msg)
                warnings.warn(msg)

    def close(self) -> None:
        """
        Restore the terminal: show the cursor, leave the alternate screen, leave raw mode.

        Failures are recorded in :attr:`errors` and reported by
        :func:`warnings.warn`, never raised. Calling :meth:`close` again has
        no effect.
        """
        # pylint: disable=global-statement
        global _TERMINAL_ACTIVE
        if self._closed:
            return
        self._closed = True
        try:
            self.__release()
        finally:
            _TERMINAL_ACTIVE = False

    def __enter__(self) -> 'Terminal':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    @property
    def driver(self) -> Driver:
        """Read-only property: the terminal driver in use."""
        return self._driver

    @property
    def closed(self) -> bool:
        """Read-only property: Whether :meth:`close` has restored the terminal."""
        return self._closed

    @property
    def raw_mode_active(self) -> bool:
        """Read-only property: Whether raw mode is held by this Terminal."""
        return self._raw_mode_active

    @property
    def alternate_screen_active(self) -> bool:
        """Read-only property: Whether the alternate screen is held by this Terminal."""
        return self._alternate_screen_active

    @property
    def cursor_hidden(self) -> bool:
        """Read-only property: Whether the cursor is hidden by this Terminal."""
        return self._cursor_hidden

    @property
    def does_styling(self) -> bool:
        """
        Read-only property: Whether this class instance may emit attribute sequences.

        :rtype: bool
        """
        return self._does_styling

    @property
    def normal(self) -> str:
        """
        A sequence that resets all video attributes, empty when not styling.

        :rtype: str
        """
        return NORMAL if self._does_styling else ''

    def _formatting_string(self, spec: StyleSpec) -> Union[FormattingString, NullCallableString]:
        if self._does_styling:
            return FormattingString(attributes(spec), NORMAL, spec)
        return NullCallableString(spec)

    def style(self, spec: str, text: str) -> StyledText:
        """
        Return ``text`` styled by ``spec``.

        :arg str spec: style specification ``[bold_]color[_on_color]``, such
            as ``'red'``, ``'bold_blue'``, ``'green_on_black'``, or
            ``'bold_white_on_blue'``. Colors are ``black``, ``red``, ``green``,
            ``yellow``, ``blue``, ``magenta``, ``cyan``, ``white``, and ``grey``.
        :arg str text: text to be styled.
        :rtype: StyledText
        :raises UnsupportedStyleMember: ``spec`` contains an unknown token.
        :raises InvalidStyleSpec: ``spec`` is otherwise malformed.

        A wrong style is a programming error: it is raised even when this
        Terminal does no styling. Use :meth:`formatter` to validate
        specifications from untrusted sources without raising.
        """
        return self._formatting_string(parse(spec))(text)

    def formatter(self, value: str) -> Union[NullCallableString, FormattingString]:
        """
        Provides callable formatting string for the style specification ``value``.

        :arg str value: style specification, such as ``"bold_red_on_white"``.
        :rtype: :class:`FormattingString` or :class:`NullCallableString`

        Calling ``term.formatter('bold_red')('hi')`` is equivalent to
        ``term.style('bold_red', 'hi')``, but a specification that is not valid
        returns a :class:`NullCallableString` rather than raising.
        """
        try:
            spec = parse(value)
        except InvalidStyleSpec:
            return NullCallableString()
        return self._formatting_string(spec)

    def move_to(self, x: int, y: int) -> 'Terminal':
        """
        Queue movement of the cursor to the given ``(x, y)`` screen coordinates.

        :arg int x: horizontal position, from left, *0*, to right edge of screen, *width - 1*.
        :arg int y: vertical position, from top, *0*, to bottom of screen, *height - 1*.
        :rtype: Terminal
        :raises ValueError: a coordinate is negative.
        :raises DriverIoFailure: the movement could not be written.
        """
        _check_position(x, y)
        self._driver.move_cursor_to(x, y)
        return self

    def print(self, text: str) -> 'Terminal':
        """
        Queue ``text``, plain or :class:`~.StyledText`, for output without flushing.

        :rtype: Terminal
        :raises DriverIoFailure: the text could not be written.
        """
        self._driver.write(str(text))
        return self

    def flush(self) -> 'Terminal':
        """
        Force queued output to the terminal.

        :rtype: Terminal
        :raises DriverIoFailure: the output could not be flushed.
        """
        self._driver.flush()
        return self

    def clear(self) -> 'Terminal':
        """
        Queue erasure of the entire screen. The cursor is not moved.

        :rtype: Terminal
        """
        self._driver.clear_screen()
        return self

    def size(self) -> Tuple[int, int]:
        """
        Return the window size as ``(width, height)``.

        :rtype: tuple
        """
        return self._driver.size()

    @property
    def height(self) -> int:
        """
        Read-only property: Height of the terminal (in number of lines).

        :rtype: int
        """
        return self.size()[1]

    @property
    def width(self) -> int:
        """
        Read-only property: Width of the terminal (in number of columns).

        :rtype: int
        """
        return self.size()[0]

    def get_location(self) -> Tuple[int, int]:
        """
        Return the cursor position as ``(x, y)``.

        :rtype: tuple
        :raises DriverIoFailure: the terminal did not report its cursor position.

        .. note:: The ``(x, y)`` order matches the parameters of
            :meth:`move_to` and :meth:`location`.
        """
        return self._driver.query_cursor_position()

    def location(self, x: Optional[int] = None, y: Optional[int] = None) -> LocationGuard:
        """
        Move the cursor, returning a guard that moves it back.

        :arg int x: horizontal position, from left, *0*, to right edge of screen, *width - 1*.
        :arg int y: vertical position, from top, *0*, to bottom of screen, *height - 1*.
        :rtype: LocationGuard
        :raises DriverIoFailure: the cursor position could not be determined,
            or the movement could not be written.

        The current position is recorded, and the cursor is moved before this
        method returns. Leaving the guard's ``with`` block restores the
        recorded position and flushes::

            with term.location(0, term.height - 1):
                term.print(term.style('black_on_white', ' status ')).flush()

        Specify ``x`` to move to a certain column, ``y`` to move to a certain
        row, both, or neither. If you specify neither, only the saving and
        restoration of cursor position will happen.
        """
        _check_position(0 if x is None else x, 0 if y is None else y)
        saved_x, saved_y = self._driver.query_cursor_position()
        self._driver.move_cursor_to(saved_x if x is None else x,
                                    saved_y if y is None else y)
        return LocationGuard(self._driver, saved_x, saved_y)

    @staticmethod
    def length(text: str) -> int:
        """
        Return printable length of a string containing sequences.

        :arg str text: String to measure. May contain terminal sequences.
        :rtype: int
        :returns: The number of terminal character cells the string will occupy
            when printed

        Wide characters that consume 2 character cells are supported.
        """
        return length(text)

    @staticmethod
    def strip_seqs(text: str) -> str:
        r"""
        Return ``text`` stripped of only its terminal sequences.

        :rtype: str

        >>> term.strip_seqs(term.style('red', 'xyz'))
        'xyz'
        """
        return strip_seqs(text)


def _check_position(x: int, y: int) -> None:
    if x < 0 or y < 0:
        raise ValueError(f'invalid position ({x}, {y}) (must be integers >= 0)')


#: _TERMINAL_ACTIVE = False
#: Raw mode, the alternate screen and cursor visibility belong to the one
#: terminal device of the process, and none of them nest: a second Terminal
#: would record the first one's modes as "original" and restore them on close.
#: This flag marks a Terminal as open between its construction and
#: :meth:`Terminal.close`, so that a second one raises :class:`TerminalInUse`.
