"""Sub-module providing callable formatting strings and styled text."""
# std imports
from typing import Optional

# local
from .styles import StyleSpec


class StyledText(str):
    """
    A string of text wrapped by the attributes of a :class:`~.StyleSpec`.

    The string value is the rendered form: attribute sequences, the literal
    text, then the sequence resetting all attributes. When the terminal does
    not do styling, the string value is the literal text alone.

    .. py:attribute:: text

        The text object given to be styled, never copied.

    .. py:attribute:: spec

        The :class:`~.StyleSpec` applied.
    """

    def __new__(cls, text: str, spec: StyleSpec,
                formatting: str = '', normal: str = '') -> 'StyledText':
        """
        Class constructor accepting 4 positional arguments.

        :arg str text: literal text.
        :arg StyleSpec spec: specification rendered by ``formatting``.
        :arg str formatting: attribute sequences, empty when not styling.
        :arg str normal: terminating sequence, empty when not styling.
        """
        value = f'{formatting}{text}{normal}' if formatting else text
        new = str.__new__(cls, value)
        new.text = text
        new.spec = spec
        return new

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.text!r}, {self.spec!r})'


class FormattingString(str):
    r"""
    A Unicode string which wraps text in the attributes of a :class:`~.StyleSpec`.

    >>> style = FormattingString('\x1b[1m\x1b[31m', '\x1b[m', parse('bold_red'))
    >>> style('kitty')
    StyledText('kitty', StyleSpec(bold=True, foreground='red', background=None))
    """

    def __new__(cls, formatting: str, normal: str, spec: StyleSpec) -> 'FormattingString':
        """
        Class constructor accepting 3 positional arguments.

        :arg str formatting: attribute sequences, such as ``'\x1b[31m'``.
        :arg str normal: terminating sequence, such as ``'\x1b[m'``.
        :arg StyleSpec spec: specification the sequences were built from.
        """
        new = str.__new__(cls, formatting)
        new._normal = normal
        new.spec = spec
        return new

    def __call__(self, text: str) -> StyledText:
        """Return ``text`` wrapped by this formatting and the terminating sequence."""
        return StyledText(text, self.spec, str(self), self._normal)


class NullCallableString(str):
    """
    An empty string which returns its argument unstyled when called.

    Used when the terminal does not do styling, so that specifications are
    still validated but emit no sequences, and returned by
    :meth:`~.Terminal.formatter` for an invalid specification, where it has
    no :attr:`spec` and returns ``text`` unchanged.
    """

    def __new__(cls, spec: Optional[StyleSpec] = None) -> 'NullCallableString':
        new = str.__new__(cls, '')
        new.spec = spec
        return new

    def __call__(self, text: str) -> str:
        if self.spec is None:
            return text
        return StyledText(text, self.spec)
