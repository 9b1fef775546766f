# -*- coding: utf-8 -*-
"""Module containing the terminal driver primitives and their default realization."""
# std imports
import os
import re
import sys
import time
import codecs
import locale
import select
import struct
import platform
import warnings
import collections
from typing import IO, Dict, List, Tuple, Optional

# local
from .errors import DriverIoFailure, DriverReleaseFailure, DriverAcquisitionFailure
from .sequences import CLEAR_SCREEN

# isort: off

HAS_TTY = True
if platform.system() == 'Windows':
    IS_WINDOWS = True
    import jinxed as curses  # pylint: disable=import-error
else:
    IS_WINDOWS = False
    import curses

    try:
        import fcntl
        import termios
        import tty
    except ImportError:
        warnings.warn(
            "One or more of the modules: 'termios', 'fcntl', and 'tty' "
            f"are not found on your platform '{platform.system()}'. "
            "Raw mode cannot be entered and window size is assumed."
        )
        HAS_TTY = False

#: VT100 sequences used when terminfo is not consulted or lacks a capability.
CAPABILITIES_FALLBACK = collections.OrderedDict((
    ('smcup', '\x1b[?1049h'),
    ('rmcup', '\x1b[?1049l'),
    ('civis', '\x1b[?25l'),
    ('cnorm', '\x1b[?25h'),
    ('u7', '\x1b[6n'),
))

#: Cursor position report, ``ESC [ row ; column R``, both 1-based.
RE_CURSOR_REPORT = re.compile(r'\x1b\[(\d+);(\d+)R')

_CUR_KIND = None  # See comments at end of file


class WINSZ(collections.namedtuple('WINSZ', (
        'ws_row', 'ws_col', 'ws_xpixel', 'ws_ypixel'))):
    """
    Structure represents return value of :const:`termios.TIOCGWINSZ`.

    .. py:attribute:: ws_row

        rows, in characters

    .. py:attribute:: ws_col

        columns, in characters

    .. py:attribute:: ws_xpixel

        horizontal size, pixels

    .. py:attribute:: ws_ypixel

        vertical size, pixels
    """
    #: format of termios structure
    _FMT = 'hhhh'
    #: buffer of termios structure appropriate for ioctl argument
    _BUF = '\x00' * struct.calcsize(_FMT)


def _time_left(stime: float, timeout: Optional[float]) -> Optional[float]:
    """
    Return time remaining since ``stime`` before given ``timeout``.

    :arg float stime: starting time for measurement
    :arg float timeout: timeout period, may be set to None to
       indicate no timeout (where None is always returned).
    :rtype: float or int
    :returns: time remaining as float. If no time is remaining,
       then the integer ``0`` is returned.
    """
    return max(0, timeout - (time.time() - stime)) if timeout else timeout


class Driver():
    """
    The primitives a :class:`~.Terminal` requires of a terminal driver.

    Acquisition primitives raise :class:`~.DriverAcquisitionFailure`, release
    primitives raise :class:`~.DriverReleaseFailure`, and all others raise
    :class:`~.DriverIoFailure`. Coordinates are 0-based ``(x, y)``: column
    from the left, row from the top.
    """

    #: Whether the output stream is attached to a terminal.
    is_a_tty = False

    def enter_raw_mode(self) -> None:
        """Disable line buffering, echo, and input processing."""
        raise NotImplementedError

    def leave_raw_mode(self) -> None:
        """Restore the input mode saved by :meth:`enter_raw_mode`."""
        raise NotImplementedError

    def enter_alternate_screen(self) -> None:
        """Switch to the secondary screen buffer."""
        raise NotImplementedError

    def leave_alternate_screen(self) -> None:
        """Switch back to the primary screen buffer."""
        raise NotImplementedError

    def hide_cursor(self) -> None:
        """Make the cursor invisible."""
        raise NotImplementedError

    def show_cursor(self) -> None:
        """Make the cursor visible."""
        raise NotImplementedError

    def move_cursor_to(self, x: int, y: int) -> None:
        """Queue an absolute cursor movement."""
        raise NotImplementedError

    def query_cursor_position(self) -> Tuple[int, int]:
        """Return the current cursor position as ``(x, y)``."""
        raise NotImplementedError

    def write(self, text: str) -> None:
        """Queue ``text`` for output without flushing."""
        raise NotImplementedError

    def flush(self) -> None:
        """Force queued output to the device."""
        raise NotImplementedError

    def clear_screen(self) -> None:
        """Queue erasure of the entire screen."""
        raise NotImplementedError

    def size(self) -> Tuple[int, int]:
        """Return the window size as ``(width, height)``."""
        raise NotImplementedError


class TerminalDriver(Driver):
    """
    Driver of a POSIX terminal: :mod:`termios` for raw mode, terminfo for sequences.

    Sequences are looked up with :func:`curses.tigetstr` when the output stream
    is a terminal, and VT100 sequences are used otherwise, so that output
    directed to a file or :class:`io.StringIO` remains predictable.
    """
    # pylint: disable=too-many-instance-attributes

    def __init__(self, kind: Optional[str] = None, stream: Optional[IO[str]] = None,
                 timeout: Optional[float] = None) -> None:
        """
        Initialize the driver.

        :arg str kind: A terminal string as taken by :func:`curses.setupterm`.
            Defaults to the value of the ``TERM`` environment variable.
        :arg file stream: A file-like object representing the Terminal output.
            Defaults to the original value of :obj:`sys.__stdout__`.
        :arg float timeout: Seconds to await a cursor position report before
            :meth:`query_cursor_position` fails; ``None`` awaits indefinitely.
        """
        self.errors: List[str] = [
            f'parameters: kind={kind!r}, stream={stream!r}, timeout={timeout!r}',
        ]
        self._stream = stream if stream is not None else sys.__stdout__
        self._timeout = timeout
        self._keyboard_fd: Optional[int] = None
        self._init_descriptor: Optional[int] = None
        self._is_a_tty = False
        self._saved_mode: Optional[list] = None
        self._terminfo = False
        self.__init__streams()
        if IS_WINDOWS and self._init_descriptor is not None:
            self._kind = kind or curses.get_term(self._init_descriptor)
        else:
            self._kind = kind or os.environ.get('TERM', 'dumb') or 'dumb'
        self.__init__capabilities()

        encoding = locale.getpreferredencoding() or 'UTF-8'
        try:
            self._keyboard_decoder = codecs.getincrementaldecoder(encoding)()
        except LookupError as err:
            warnings.warn(f'LookupError: {err}, defaulting to UTF-8 for keyboard.')
            self._keyboard_decoder = codecs.getincrementaldecoder('UTF-8')()

    def __init__streams(self) -> None:
        stream_fd = None
        if not callable(getattr(self._stream, 'fileno', None)):
            self.errors.append('stream has no fileno method')
        else:
            try:
                stream_fd = self._stream.fileno()
            except (ValueError, OSError) as err:
                # The stream is not a file, such as the case of StringIO, or,
                # when it has been "detached".
                self.errors.append(f'Unable to determine output stream file descriptor: {err}')
            else:
                self._is_a_tty = os.isatty(stream_fd)
                if not self._is_a_tty:
                    self.errors.append('stream not a TTY')

        # Keyboard valid as stdin only when output stream is stdout or stderr and is a tty.
        if self._stream in (sys.__stdout__, sys.__stderr__) and self._is_a_tty:
            try:
                if sys.__stdin__ is not None:
                    self._keyboard_fd = sys.__stdin__.fileno()
            except (AttributeError, ValueError) as err:
                self.errors.append(f'Unable to determine input stream file descriptor: {err}')
            else:
                if self._keyboard_fd is not None and not os.isatty(self._keyboard_fd):
                    self.errors.append('Input stream is not a TTY')
                    self._keyboard_fd = None

        self._init_descriptor = stream_fd

    def __init__capabilities(self) -> None:
        self._caps: Dict[str, str] = dict(CAPABILITIES_FALLBACK)
        self._caps['cup'] = ''
        if not self._is_a_tty:
            return
        try:
            curses.setupterm(self._kind, self._init_descriptor)
        except curses.error as err:
            msg = f'Failed to setupterm(kind={self._kind!r}): {err}'
            warnings.warn(msg)
            self.errors.append(msg)
            return
        # pylint: disable=global-statement
        global _CUR_KIND
        if _CUR_KIND is None or self._kind == _CUR_KIND:
            _CUR_KIND = self._kind
        else:
            # terminfo 'kind' is immutable in a python process: once
            # initialized by setupterm, the curses module cannot change it.
            warnings.warn(
                f'A terminal of kind "{self._kind}" has been requested; due to an'
                ' internal python curses bug, terminal capabilities'
                f' for a terminal of kind "{_CUR_KIND}" will continue to be'
                ' returned for the remainder of this process.'
            )
            self.errors.append(f'terminal kind {self._kind!r} superseded by {_CUR_KIND!r}')
        self._terminfo = True
        for name in tuple(self._caps):
            value = curses.tigetstr(name)
            if value:
                self._caps[name] = value.decode('latin1')

    @property
    def kind(self) -> str:
        """Read-only property: Terminal kind determined on class initialization."""
        return self._kind

    @property
    def is_a_tty(self) -> bool:  # type: ignore[override]
        """Read-only property: Whether the output stream is a terminal."""
        return self._is_a_tty

    @property
    def stream(self) -> IO[str]:
        """Read-only property: stream the driver writes to."""
        return self._stream

    def enter_raw_mode(self) -> None:
        if not HAS_TTY or self._keyboard_fd is None:
            raise DriverAcquisitionFailure(
                'Raw mode requires both input and output streams attached to a terminal')
        try:
            # pylint: disable-next=possibly-used-before-assignment
            self._saved_mode = termios.tcgetattr(self._keyboard_fd)
            tty.setraw(self._keyboard_fd, termios.TCSANOW)
        except (termios.error, OSError) as err:
            raise DriverAcquisitionFailure(f'Failed to enter raw mode: {err}') from err

    def leave_raw_mode(self) -> None:
        if self._saved_mode is None:
            return
        save_mode, self._saved_mode = self._saved_mode, None
        try:
            termios.tcsetattr(self._keyboard_fd, termios.TCSAFLUSH, save_mode)
        except (termios.error, OSError) as err:
            raise DriverReleaseFailure(f'Failed to leave raw mode: {err}') from err

    def _emit(self, text: str, failure: type) -> None:
        try:
            self._stream.write(text)
            self._stream.flush()
        except (OSError, ValueError) as err:
            raise failure(f'Failed to write {text!r}: {err}') from err

    def enter_alternate_screen(self) -> None:
        self._emit(self._caps['smcup'], DriverAcquisitionFailure)

    def leave_alternate_screen(self) -> None:
        self._emit(self._caps['rmcup'], DriverReleaseFailure)

    def hide_cursor(self) -> None:
        self._emit(self._caps['civis'], DriverAcquisitionFailure)

    def show_cursor(self) -> None:
        self._emit(self._caps['cnorm'], DriverReleaseFailure)

    def move_cursor_to(self, x: int, y: int) -> None:
        if self._terminfo and self._caps['cup']:
            try:
                seq = curses.tparm(self._caps['cup'].encode('latin1'), y, x).decode('latin1')
            except curses.error as err:
                raise DriverIoFailure(f'Failed to parameterize cup({y}, {x}): {err}') from err
        else:
            seq = f'\x1b[{y + 1};{x + 1}H'
        self.write(seq)

    def write(self, text: str) -> None:
        try:
            self._stream.write(text)
        except (OSError, ValueError) as err:
            raise DriverIoFailure(f'Failed to write: {err}') from err

    def flush(self) -> None:
        try:
            self._stream.flush()
        except (OSError, ValueError) as err:
            raise DriverIoFailure(f'Failed to flush: {err}') from err

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)

    def getch(self) -> str:
        """
        Read, decode, and return the next byte from the keyboard stream.

        :rtype: unicode
        :returns: a single unicode character, or ``''`` if a multi-byte
            sequence has not yet been fully received.
        """
        assert self._keyboard_fd is not None
        byte = os.read(self._keyboard_fd, 1)
        if not byte:
            raise EOFError('keyboard input stream is closed')
        return self._keyboard_decoder.decode(byte, final=False)

    def kbhit(self, timeout: Optional[float] = None) -> bool:
        """
        Return whether a byte may be read by :meth:`getch` without blocking.

        :arg float timeout: When ``timeout`` is 0, this call is non-blocking,
            otherwise blocking indefinitely until input is detected when None.
        :rtype: bool
        """
        if self._keyboard_fd is None:
            return False
        ready_r, _, _ = select.select([self._keyboard_fd], [], [], timeout)
        return bool(ready_r)

    def _read_until(self, pattern: 're.Pattern[str]',
                    timeout: Optional[float]) -> Optional['re.Match[str]']:
        """
        Read keyboard input until ``pattern`` is found or ``timeout`` elapses.

        Input preceding the match, such as keystrokes typed while the terminal
        composed its response, is discarded.
        """
        stime = time.time()
        buf = ''
        while True:
            if not self.kbhit(timeout=_time_left(stime, timeout)):
                return None
            buf += self.getch()
            match = pattern.search(buf)
            if match:
                return match

    def query_cursor_position(self) -> Tuple[int, int]:
        if self._keyboard_fd is None:
            raise DriverIoFailure(
                'Cursor position cannot be queried without a terminal attached to input')
        self.write(self._caps['u7'])
        self.flush()
        try:
            match = self._read_until(RE_CURSOR_REPORT, self._timeout)
        except (OSError, ValueError, EOFError) as err:
            raise DriverIoFailure(f'Failed to read cursor position report: {err}') from err
        if match is None:
            raise DriverIoFailure(
                f'No cursor position report received within {self._timeout} seconds')
        row, col = (int(val) for val in match.groups())
        return col - 1, row - 1

    @staticmethod
    def _winsize(fd: int) -> WINSZ:
        """
        Return named tuple describing size of the terminal by ``fd``.

        If the given platform does not have modules :mod:`termios`,
        :mod:`fcntl`, or :mod:`tty`, window size of 80 columns by 24
        rows is always returned.

        :arg int fd: file descriptor queries for its window size.
        :raises IOError: the file descriptor ``fd`` is not a terminal.
        :rtype: WINSZ
        """
        if HAS_TTY:
            # pylint: disable=protected-access,possibly-used-before-assignment
            data = fcntl.ioctl(fd, termios.TIOCGWINSZ, WINSZ._BUF)
            return WINSZ(*struct.unpack(WINSZ._FMT, data))
        return WINSZ(ws_row=24, ws_col=80, ws_xpixel=0, ws_ypixel=0)

    def size(self) -> Tuple[int, int]:
        """
        Return the window size as ``(width, height)``.

        When neither the output stream nor :obj:`sys.__stdout__` support
        :const:`termios.TIOCGWINSZ`, the environment variables ``COLUMNS``
        and ``LINES`` are used, defaulting to 80 columns by 24 rows.
        """
        for fd in (self._init_descriptor, sys.__stdout__):
            try:
                if fd is not None:
                    winsz = self._winsize(fd)
                    if winsz.ws_row and winsz.ws_col:
                        return winsz.ws_col, winsz.ws_row
            except (IOError, OSError, ValueError, TypeError):  # pylint: disable=overlapping-except
                pass

        return int(os.getenv('COLUMNS', '80')), int(os.getenv('LINES', '24'))


#: _CUR_KIND = None
#: From libcurses/doc/ncurses-intro.html (ESR, Thomas Dickey, et. al)::
#:
#:   "After the call to setupterm(), the global variable cur_term is set to
#:    point to the current structure of terminal capabilities. By calling
#:    setupterm() for each terminal, and saving and restoring cur_term, it
#:    is possible for a program to use two or more terminals at once."
#:
#: However, if you study Python's ``./Modules/_cursesmodule.c``, you'll find::
#:
#:   if (!initialised_setupterm && setupterm(termstr,fd,&err) == ERR) {
#:
#: Python allows only one terminal kind to be initialized per process. The
#: first kind given to setupterm is recorded here, and a driver requesting
#: another kind is warned that it receives the first one's capabilities.
