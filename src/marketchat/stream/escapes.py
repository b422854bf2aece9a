"""Terminal escape sequence scrubbing.

Hides which terminal control sequences are recognized and how they are
removed from text destined for an input field. Everything here is pure.
"""

import re

# Longest suffix a decoder may hold back while waiting for a sequence to finish
MAX_PENDING_LENGTH = 24

_LINE_ENDINGS = re.compile(r"\r\n?")

# Removal order matters: mouse reports go before the generic CSI rule so
# their parameters never survive as printable residue.
_SCRUB_PATTERNS = (
    re.compile(r"\x1b\[<\d+;\d+;\d+[mM]"),          # SGR mouse report
    re.compile(r"\x1b\[\d+;\d+;\d+M"),              # legacy urxvt mouse report
    re.compile(r"\[<?\d+;\d+;\d+[mM]"),             # mouse report with ESC already eaten
    re.compile(r"\x1b\[M.{3}", re.DOTALL),          # X10 mouse report
    re.compile(r"\[M.{3}", re.DOTALL),              # X10 report with ESC already eaten
    re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]"),       # generic CSI
    re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)"),   # OSC
    re.compile(r"\x1b"),                            # stray ESC
    re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]"),  # C0 controls except tab/newline
)

_MOUSE_PATTERNS = _SCRUB_PATTERNS[:5]

_DISPLAY_NEWLINES = re.compile(r"[\r\n]")
_SIMPLE_CSI = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

# Trailing sequences that cannot be classified until more input arrives
_INCOMPLETE_TAILS = (
    re.compile(r"\x1b\[M.{0,2}\Z", re.DOTALL),
    re.compile(r"\x1b\[[0-9;?<]*[ -/]*\Z"),
    re.compile(r"\x1b\][^\x07\x1b]*\x1b?\Z"),
    re.compile(r"\x1b\Z"),
)


def _scrub_once(text: str) -> str:
    text = _LINE_ENDINGS.sub("\n", text)
    for pattern in _SCRUB_PATTERNS:
        text = pattern.sub("", text)
    return text


def scrub(text: str) -> str:
    """Remove terminal control sequences from text meant for an input field.

    Newlines and tabs survive so multi-paragraph pastes keep their shape.
    Removing one sequence can splice its neighbours into a new match, so the
    passes repeat until nothing changes; this makes the function idempotent.

    Args:
        text: Raw text, possibly containing escape sequences

    Returns:
        Text with every recognized control sequence removed
    """
    while True:
        cleaned = _scrub_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def has_mouse_sequence(value: str) -> bool:
    """Check whether a value carries any mouse report, complete or ESC-stripped."""
    return any(pattern.search(value) for pattern in _MOUSE_PATTERNS)


def sanitize_line(text: str) -> str:
    """Flatten text into one display row."""
    text = _DISPLAY_NEWLINES.sub(" ", text)
    return _SIMPLE_CSI.sub("", text).rstrip()


def split_incomplete_escape(text: str) -> tuple[str, str]:
    """Split off a trailing escape sequence that has not finished arriving.

    Returns:
        Tuple of (complete text, pending tail). The tail is empty when the
        text ends cleanly or when the unfinished sequence is too long to be
        anything worth waiting for.
    """
    start = text.rfind("\x1b")
    if start == -1:
        return text, ""

    tail = text[start:]
    if len(tail) > MAX_PENDING_LENGTH:
        return text, ""

    for pattern in _INCOMPLETE_TAILS:
        if pattern.match(tail):
            return text[:start], tail
    return text, ""
