"""Sanitization for node-supplied text shown in the terminal.

Error messages from a remote node are untrusted: they may carry ANSI escape
sequences or Rich markup.
"""

import re

from rich.markup import escape as rich_escape

ANSI_ESCAPE_PATTERN = re.compile(
    r'\x1b\[[0-9;]*[ABCDEFGHJKSTfmnsu]|'   # CSI (colors, cursor movement, clear)
    r'\x1b\[\?[0-9;]*[hl]|'                # CSI ? (mode changes)
    r'\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|'  # OSC (title, clipboard)
    r'\x1b[PX^_][^\x1b]*\x1b\\'            # DCS, SOS, PM, APC
)

# C0 controls except \t \n \r, plus DEL
CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def strip_terminal_escapes(text: str) -> str:
    """Remove ANSI escape sequences and control characters.

    Examples:
        >>> strip_terminal_escapes("\\x1b[31mRed\\x1b[0m")
        'Red'
    """
    text = ANSI_ESCAPE_PATTERN.sub('', text)
    return CONTROL_CHAR_PATTERN.sub('', text)


def sanitize_for_display(text: str) -> str:
    """Strip terminal escapes, then escape Rich markup.

    Examples:
        >>> sanitize_for_display("\\x1b[31m[red]attack[/red]\\x1b[0m")
        '\\\\[red]attack\\\\[/red]'
    """
    return rich_escape(strip_terminal_escapes(text))
