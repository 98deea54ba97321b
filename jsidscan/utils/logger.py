"""Terminal-safe text handling for diagnostics.

Detects whether the output stream can carry UTF-8 and, when it cannot,
replaces characters it would choke on so that echoing a source line never
crashes the run.
"""
import locale
import sys
from typing import Optional, TextIO


# Characters commonly found in JS sources and comments, with ASCII stand-ins
ICON_MAP = {
    '…': '...',
    '‘': "'",
    '’': "'",
    '“': '"',
    '”': '"',
    '–': '-',
    '\u2014': '--',
    '→': '->',
    '←': '<-',
    '⇒': '=>',
    '•': '*',
    '\u00a0': ' ',
    '\ufeff': '',
}

UTF8_ENCODINGS = {'utf-8', 'utf8', 'utf_8'}


def detect_terminal_encoding(stream: Optional[TextIO] = None) -> str:
    """Detect the encoding of ``stream`` (stdout by default).

    Returns:
        str: Encoding name, lower-cased ('utf-8', 'cp1252', 'ascii', ...)
    """
    stream = stream if stream is not None else sys.stdout
    encoding = getattr(stream, 'encoding', None)
    if encoding:
        return encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable(stream: Optional[TextIO] = None) -> bool:
    """Check if the stream can carry UTF-8 text."""
    return detect_terminal_encoding(stream) in UTF8_ENCODINGS


def sanitize_for_terminal(text: str, stream: Optional[TextIO] = None) -> str:
    """Make ``text`` printable on ``stream``.

    Known typographic characters get ASCII replacements; anything else the
    stream cannot encode becomes a backslash escape.

    Args:
        text: Text possibly containing non-ASCII characters
        stream: Target stream, stdout by default

    Returns:
        str: Text safe for the stream's encoding
    """
    if is_utf8_capable(stream):
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)

    encoding = detect_terminal_encoding(stream)
    try:
        return sanitized.encode(encoding, errors='backslashreplace').decode(encoding)
    except LookupError:
        return sanitized.encode('ascii', errors='backslashreplace').decode('ascii')
