"""Sub-module providing :class:`LocationGuard`, returned by :meth:`~.Terminal.location`."""
# std imports
import warnings
from typing import TYPE_CHECKING, Any, Tuple

if TYPE_CHECKING:  # pragma: no cover
    # local
    from .driver import Driver


class LocationGuard():
    """
    Context manager returning the cursor to where it was when the guard was made.

    The cursor has already been moved when the guard is returned by
    :meth:`~.Terminal.location`. On exit from the ``with`` block, by any
    path, the cursor is moved back to :attr:`saved` and output is flushed:

    .. code-block:: python

        with Terminal() as term:
            with term.location(0, 0):
                term.print(term.style('bold_red', 'status')).flush()
            term.print('back where we were').flush()

    Guards nest, each restoring the position its enclosing block left the
    cursor in. A guard restores only once, even when :meth:`restore` is
    called explicitly before the block exits. A guard used without ``with``
    and never restored is restored when it is garbage collected.
    """

    def __init__(self, driver: 'Driver', saved_x: int, saved_y: int) -> None:
        self._driver = driver
        self._saved = (saved_x, saved_y)
        self._restored = False

    @property
    def saved(self) -> Tuple[int, int]:
        """Read-only property: cursor position ``(x, y)`` restored on exit."""
        return self._saved

    @property
    def restored(self) -> bool:
        """Read-only property: Whether the cursor position has been restored."""
        return self._restored

    def restore(self) -> None:
        """Move the cursor back to :attr:`saved` and flush, unless already done."""
        if self._restored:
            return
        self._restored = True
        self._driver.move_cursor_to(*self._saved)
        self._driver.flush()

    def __enter__(self) -> 'LocationGuard':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.restore()

    def __del__(self) -> None:
        try:
            self.restore()
        except Exception as err:  # pylint: disable=broad-except
            warnings.warn(f'Failed to restore cursor position {self._saved!r}: {err}')

    def __repr__(self) -> str:
        return f'{type(self).__name__}(saved={self._saved!r}, restored={self._restored!r})'
