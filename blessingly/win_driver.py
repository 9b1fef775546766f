"""Module containing Windows version of :class:`~.TerminalDriver`."""


# std imports
import time
import msvcrt  # pylint: disable=import-error
from typing import Optional

# 3rd party
from jinxed import win32  # pylint: disable=import-error

# local
from .errors import DriverReleaseFailure, DriverAcquisitionFailure
from .driver import WINSZ
from .driver import TerminalDriver as _TerminalDriver


class TerminalDriver(_TerminalDriver):
    """Windows subclass of :class:`~.driver.TerminalDriver`."""

    def enter_raw_mode(self) -> None:
        """
        Enter raw mode by ``jinxed.win32.setraw()``.

        In raw mode, special input characters such as ``^C`` are delivered
        as input rather than interpreted by the console.
        """
        if self._keyboard_fd is None:
            raise DriverAcquisitionFailure(
                'Raw mode requires both input and output streams attached to a console')
        filehandle = msvcrt.get_osfhandle(self._keyboard_fd)
        try:
            self._saved_mode = win32.get_console_mode(filehandle)
            win32.setraw(filehandle)
        except OSError as err:
            raise DriverAcquisitionFailure(f'Failed to enter raw mode: {err}') from err

    def leave_raw_mode(self) -> None:
        if self._saved_mode is None:
            return
        save_mode, self._saved_mode = self._saved_mode, None
        try:
            win32.set_console_mode(msvcrt.get_osfhandle(self._keyboard_fd), save_mode)
        except OSError as err:
            raise DriverReleaseFailure(f'Failed to leave raw mode: {err}') from err

    def getch(self) -> str:
        r"""
        Read and return the next character from the keyboard stream.

        For versions of Windows 10.0.10586 and later, the console is expected
        to be in ENABLE_VIRTUAL_TERMINAL_INPUT mode and the default method is
        called.

        For older versions of Windows, msvcrt.getwch() is used. If the received
        character is ``\x00`` or ``\xe0``, the next character is
        automatically retrieved.
        """
        if win32.VTMODE_SUPPORTED:
            return super().getch()

        rtn = msvcrt.getwch()
        if rtn in {'\x00', '\xe0'}:
            rtn += msvcrt.getwch()
        return rtn

    def kbhit(self, timeout: Optional[float] = None) -> bool:
        """
        Return whether a keypress has been detected on the keyboard.

        :arg float timeout: When ``timeout`` is 0, this call is
            non-blocking, otherwise blocking indefinitely until keypress
            is detected when None (default).
        :rtype: bool
        """
        end = time.time() + (timeout or 0)
        while True:
            if msvcrt.kbhit():
                return True
            if timeout is not None and end < time.time():
                break
            time.sleep(0.01)
        return False

    @staticmethod
    def _winsize(fd: int) -> WINSZ:
        """
        Return named tuple describing size of the terminal by ``fd``.

        :arg int fd: file descriptor queries for its window size.
        :rtype: WINSZ
        """
        window = win32.get_terminal_size(fd)
        return WINSZ(ws_row=window.lines, ws_col=window.columns,
                     ws_xpixel=0, ws_ypixel=0)
