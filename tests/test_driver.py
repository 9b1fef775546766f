# -*- coding: utf-8 -*-
"""Tests for the default POSIX terminal driver."""
# std imports
import io
import os
import sys
import platform
import warnings
from unittest import mock

# 3rd party
import pytest

# local
from blessingly.driver import WINSZ, TerminalDriver
from blessingly.errors import DriverIoFailure, DriverReleaseFailure, DriverAcquisitionFailure

pytestmark = pytest.mark.skipif(platform.system() == 'Windows',
                                reason='POSIX terminal driver')

if platform.system() != 'Windows':
    # std imports
    import curses
    import termios


class TtyStream(io.StringIO):
    """A StringIO claiming a file descriptor, for use with a patched os.isatty."""

    def fileno(self):
        return 99


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def keyboard():
    """A pipe standing in for the keyboard: (driver-side read fd, write fd)."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def fresh_kind(monkeypatch):
    """Each test begins as though no terminal kind was initialized."""
    monkeypatch.setattr('blessingly.driver._CUR_KIND', None)


def test_not_a_tty(stream):
    """A StringIO stream is no terminal, and has no keyboard."""
    driver = TerminalDriver(stream=stream)
    assert not driver.is_a_tty
    assert driver.stream is stream
    assert any('file descriptor' in err for err in driver.errors)


def test_kind_from_environment(monkeypatch, stream):
    """The terminal kind defaults to $TERM, then 'dumb'."""
    monkeypatch.setenv('TERM', 'vt220')
    assert TerminalDriver(stream=stream).kind == 'vt220'
    assert TerminalDriver(kind='xterm', stream=stream).kind == 'xterm'
    monkeypatch.delenv('TERM')
    assert TerminalDriver(stream=stream).kind == 'dumb'


@pytest.mark.parametrize('primitive,expected', [
    ('enter_alternate_screen', '\x1b[?1049h'),
    ('leave_alternate_screen', '\x1b[?1049l'),
    ('hide_cursor', '\x1b[?25l'),
    ('show_cursor', '\x1b[?25h'),
    ('clear_screen', '\x1b[2J'),
])
def test_fallback_sequences(stream, primitive, expected):
    """Without terminfo, VT100 sequences are written."""
    getattr(TerminalDriver(stream=stream), primitive)()
    assert stream.getvalue() == expected


def test_move_cursor_to_fallback(stream):
    """Coordinates are 0-based (x, y); the sequence is 1-based (row, column)."""
    driver = TerminalDriver(stream=stream)
    driver.move_cursor_to(4, 2)
    driver.move_cursor_to(0, 0)
    assert stream.getvalue() == '\x1b[3;5H\x1b[1;1H'


def test_write_does_not_flush():
    """write() leaves flushing to flush()."""
    stream = mock.Mock(spec=['write', 'flush'])
    driver = TerminalDriver(stream=stream)
    driver.write('xyz')
    stream.write.assert_called_once_with('xyz')
    stream.flush.assert_not_called()
    driver.flush()
    stream.flush.assert_called_once_with()


def test_io_failures(stream):
    """Writes to a closed stream are DriverIoFailure."""
    driver = TerminalDriver(stream=stream)
    stream.close()
    with pytest.raises(DriverIoFailure):
        driver.write('x')
    with pytest.raises(DriverIoFailure):
        driver.move_cursor_to(1, 1)


def test_flush_failure():
    """A stream failing to flush is DriverIoFailure."""
    stream = mock.Mock(spec=['write', 'flush'])
    stream.flush.side_effect = OSError(5, 'Input/output error')
    driver = TerminalDriver(stream=stream)
    with pytest.raises(DriverIoFailure) as err:
        driver.flush()
    assert isinstance(err.value.__cause__, OSError)


def test_acquisition_and_release_failures(stream):
    """Mode sequences fail as acquisition or release, as appropriate."""
    driver = TerminalDriver(stream=stream)
    stream.close()
    with pytest.raises(DriverAcquisitionFailure):
        driver.enter_alternate_screen()
    with pytest.raises(DriverAcquisitionFailure):
        driver.hide_cursor()
    with pytest.raises(DriverReleaseFailure):
        driver.leave_alternate_screen()
    with pytest.raises(DriverReleaseFailure):
        driver.show_cursor()


def test_raw_mode_requires_keyboard(stream):
    """Raw mode cannot be entered without a terminal for input."""
    driver = TerminalDriver(stream=stream)
    with pytest.raises(DriverAcquisitionFailure):
        driver.enter_raw_mode()
    # nothing was acquired, so nothing is released.
    driver.leave_raw_mode()


def test_raw_mode(stream):
    """Raw mode saves and restores the keyboard's termios attributes."""
    driver = TerminalDriver(stream=stream)
    driver._keyboard_fd = 0
    with mock.patch('blessingly.driver.termios') as mock_termios, \
            mock.patch('blessingly.driver.tty') as mock_tty:
        mock_termios.error = termios.error
        mock_termios.tcgetattr.return_value = ['saved']
        driver.enter_raw_mode()
        mock_termios.tcgetattr.assert_called_once_with(0)
        mock_tty.setraw.assert_called_once_with(0, mock_termios.TCSANOW)

        driver.leave_raw_mode()
        mock_termios.tcsetattr.assert_called_once_with(0, mock_termios.TCSAFLUSH, ['saved'])

        # released once only
        driver.leave_raw_mode()
        assert mock_termios.tcsetattr.call_count == 1


def test_raw_mode_failures(stream):
    """termios errors are acquisition and release failures."""
    driver = TerminalDriver(stream=stream)
    driver._keyboard_fd = 0
    with mock.patch('blessingly.driver.termios') as mock_termios, \
            mock.patch('blessingly.driver.tty') as mock_tty:
        mock_termios.error = termios.error
        mock_tty.setraw.side_effect = termios.error(5, 'Input/output error')
        with pytest.raises(DriverAcquisitionFailure):
            driver.enter_raw_mode()

        mock_tty.setraw.side_effect = None
        driver.enter_raw_mode()
        mock_termios.tcsetattr.side_effect = termios.error(5, 'Input/output error')
        with pytest.raises(DriverReleaseFailure) as err:
            driver.leave_raw_mode()
        assert isinstance(err.value.__cause__, termios.error)


@pytest.mark.parametrize('reply,expected', [
    (b'\x1b[6;11R', (10, 5)),
    (b'\x1b[1;1R', (0, 0)),
    (b'typed\x1b[3;4R', (3, 2)),
])
def test_query_cursor_position(stream, keyboard, reply, expected):
    """The cursor position report is read from the keyboard."""
    read_fd, write_fd = keyboard
    driver = TerminalDriver(stream=stream, timeout=1)
    driver._keyboard_fd = read_fd
    os.write(write_fd, reply)
    assert driver.query_cursor_position() == expected
    assert stream.getvalue() == '\x1b[6n'


def test_query_cursor_position_timeout(stream, keyboard):
    """No report within the timeout is DriverIoFailure."""
    read_fd, _ = keyboard
    driver = TerminalDriver(stream=stream, timeout=0.05)
    driver._keyboard_fd = read_fd
    with pytest.raises(DriverIoFailure):
        driver.query_cursor_position()


def test_query_cursor_position_closed_input(stream, keyboard):
    """Input closing before a report is DriverIoFailure."""
    read_fd, write_fd = keyboard
    os.write(write_fd, b'\x1b[6;')
    os.close(write_fd)
    driver = TerminalDriver(stream=stream)
    driver._keyboard_fd = read_fd
    with pytest.raises(DriverIoFailure):
        driver.query_cursor_position()


def test_query_cursor_position_without_keyboard(stream):
    """Without a keyboard, the position cannot be queried."""
    with pytest.raises(DriverIoFailure):
        TerminalDriver(stream=stream).query_cursor_position()


def test_size_from_winsize(stream):
    """The window size is (columns, rows)."""
    driver = TerminalDriver(stream=stream)
    with mock.patch.object(TerminalDriver, '_winsize',
                           return_value=WINSZ(ws_row=30, ws_col=100, ws_xpixel=0, ws_ypixel=0)):
        assert driver.size() == (100, 30)


def test_size_from_environment(monkeypatch, stream):
    """Without a terminal, COLUMNS and LINES are used, then 80x24."""
    driver = TerminalDriver(stream=stream)
    with mock.patch.object(TerminalDriver, '_winsize', side_effect=OSError):
        monkeypatch.setenv('COLUMNS', '132')
        monkeypatch.setenv('LINES', '43')
        assert driver.size() == (132, 43)
        monkeypatch.delenv('COLUMNS')
        monkeypatch.delenv('LINES')
        assert driver.size() == (80, 24)


def test_terminfo_sequences():
    """On a terminal, sequences are looked up in terminfo."""
    stream = TtyStream()
    terminfo = {'smcup': b'\x1b7\x1b[?47h', 'cup': b'\x1b[%i%p1%d;%p2%dH'}
    with mock.patch('blessingly.driver.os.isatty', return_value=True), \
            mock.patch('blessingly.driver.curses') as mock_curses:
        mock_curses.error = curses.error
        mock_curses.tigetstr.side_effect = terminfo.get
        mock_curses.tparm.return_value = b'\x1b[3;5H'
        driver = TerminalDriver(kind='xterm', stream=stream)
        mock_curses.setupterm.assert_called_once_with('xterm', 99)
        assert driver.is_a_tty

        driver.enter_alternate_screen()
        driver.hide_cursor()
        driver.move_cursor_to(4, 2)
        mock_curses.tparm.assert_called_once_with(terminfo['cup'], 2, 4)
    assert stream.getvalue() == '\x1b7\x1b[?47h\x1b[?25l\x1b[3;5H'


def test_terminfo_setupterm_failure():
    """A failed setupterm warns and falls back to VT100 sequences."""
    stream = TtyStream()
    with mock.patch('blessingly.driver.os.isatty', return_value=True), \
            mock.patch('blessingly.driver.curses') as mock_curses:
        mock_curses.error = curses.error
        mock_curses.setupterm.side_effect = curses.error('unknown terminal type')
        with pytest.warns(UserWarning, match='setupterm'):
            driver = TerminalDriver(kind='unknown', stream=stream)
        driver.move_cursor_to(0, 0)
        mock_curses.tparm.assert_not_called()
    assert stream.getvalue() == '\x1b[1;1H'
    assert any('setupterm' in err for err in driver.errors)


def test_terminfo_kind_is_fixed_per_process():
    """A second kind warns that the first kind's capabilities are still used."""
    with mock.patch('blessingly.driver.os.isatty', return_value=True), \
            mock.patch('blessingly.driver.curses') as mock_curses:
        mock_curses.error = curses.error
        mock_curses.tigetstr.return_value = None
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            TerminalDriver(kind='xterm', stream=TtyStream())
            TerminalDriver(kind='xterm', stream=TtyStream())
        with pytest.warns(UserWarning, match='"vt220" has been requested'):
            driver = TerminalDriver(kind='vt220', stream=TtyStream())
    assert driver.kind == 'vt220'
    assert any('superseded' in err for err in driver.errors)


def test_kind_from_console():
    """On Windows, the kind defaults to that of the console."""
    with mock.patch('blessingly.driver.IS_WINDOWS', True), \
            mock.patch('blessingly.driver.os.isatty', return_value=False), \
            mock.patch('blessingly.driver.curses') as mock_curses:
        mock_curses.get_term.return_value = 'vtwin10'
        assert TerminalDriver(stream=TtyStream()).kind == 'vtwin10'
        mock_curses.get_term.assert_called_once_with(99)
        assert TerminalDriver(kind='xterm', stream=TtyStream()).kind == 'xterm'


def test_default_stream():
    """The default stream is the original standard output."""
    assert TerminalDriver().stream is sys.__stdout__
