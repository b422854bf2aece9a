"""Terminal stream processing.

Module structure (each module hides a design decision):
- escapes.py: which control sequences exist and how they are scrubbed
- mouse.py: wheel report format and split-read buffering
- keys.py: keystroke encodings and the KeyEvent record
- terminal.py: the terminal input boundary
- tags.py: tag boundary detection in chunked text
- response.py: the streamed-reply boundary
- wrapping.py: fixed-width wrapping
- models.py: message and log storage
- render.py: message to display line conversion
- window.py: bottom-anchored scroll math

Nothing in this package imports Textual; it is plain, synchronous code.
"""

from .escapes import MAX_PENDING_LENGTH, has_mouse_sequence, sanitize_line, scrub, split_incomplete_escape
from .keys import KeyEvent, Modifier, decode_keys, parse_key
from .models import ChatLog, ChatMessage, ChatRole, LogBuffer
from .mouse import MouseScrollDecoder, ScrollDecode, decode_scroll
from .render import RenderLine, build_card, build_render_lines, card_inner_width, is_rule_line
from .response import ResponseStream, StreamUpdate
from .tags import ResponseStreamExtractor, TagState, TagStreamExtractor, TagTracker, parse_actions
from .terminal import InputResult, TerminalInput
from .window import ScrollState, ScrollWindow, scroll_window
from .wrapping import truncate_text, wrap_text

__all__ = [
    "MAX_PENDING_LENGTH",
    "ChatLog",
    "ChatMessage",
    "ChatRole",
    "InputResult",
    "KeyEvent",
    "LogBuffer",
    "Modifier",
    "MouseScrollDecoder",
    "RenderLine",
    "ResponseStream",
    "ResponseStreamExtractor",
    "ScrollDecode",
    "ScrollState",
    "ScrollWindow",
    "StreamUpdate",
    "TagState",
    "TagStreamExtractor",
    "TagTracker",
    "TerminalInput",
    "build_card",
    "build_render_lines",
    "card_inner_width",
    "decode_keys",
    "decode_scroll",
    "has_mouse_sequence",
    "is_rule_line",
    "parse_actions",
    "parse_key",
    "sanitize_line",
    "scroll_window",
    "scrub",
    "split_incomplete_escape",
    "truncate_text",
    "wrap_text",
]
