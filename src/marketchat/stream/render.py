"""Conversion of messages into wrapped, styled display lines.

Hides speaker labels, indentation, timestamps and the card layout used for
structured text. Lines are derived on every render and never stored; keys
stay stable for the same logical line so views can diff them.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .escapes import sanitize_line
from .models import ChatMessage, ChatRole
from .wrapping import wrap_text

BODY_INDENT = "  "
DEFAULT_AGENT_NAME = "Eliza"
USER_LABEL = "You"
USER_COLOR = "cyan"
AGENT_COLOR = "green"

CARD_BORDER_CHAR = "-"
CARD_DIVIDER_CHAR = "="
MIN_CARD_WIDTH = 12

_BORDER_LINE = re.compile(r"^-+$")
_DIVIDER_LINE = re.compile(r"^=+$")


@dataclass(frozen=True)
class RenderLine:
    """One display row with styling hints."""

    key: str
    text: str
    color: str | None = None
    dim: bool = False
    bold: bool = False
    italic: bool = False

    @property
    def style(self) -> str:
        """Rich style string for this line."""
        parts = [flag for flag, on in (("bold", self.bold), ("dim", self.dim), ("italic", self.italic)) if on]
        if self.color:
            parts.append(self.color)
        return " ".join(parts)


def format_time(timestamp: datetime) -> str:
    """Format as 24-hour HH:MM."""
    return timestamp.strftime("%H:%M")


def format_timestamp(timestamp: datetime) -> str:
    """Format as 24-hour HH:MM:SS."""
    return timestamp.strftime("%H:%M:%S")


def is_border_line(line: str) -> bool:
    return bool(_BORDER_LINE.match(line.rstrip()))


def is_divider_line(line: str) -> bool:
    return bool(_DIVIDER_LINE.match(line.rstrip()))


def is_rule_line(line: str) -> bool:
    """Check for a line made only of '-' or only of '=' characters."""
    return is_border_line(line) or is_divider_line(line)


def build_render_lines(
    messages: Iterable[ChatMessage],
    max_width: int,
    agent_name: str = DEFAULT_AGENT_NAME,
) -> list[RenderLine]:
    """Turn messages into display lines for a panel of the given width.

    System messages are dim italic lines with no indentation. User and
    assistant messages get a bold header followed by body lines indented by
    two columns. Rule lines (cards) skip wrapping and indentation.

    Args:
        messages: Messages in display order
        max_width: Width available for text
        agent_name: Speaker label for assistant messages

    Returns:
        Flat list of display lines
    """
    lines: list[RenderLine] = []

    for message in messages:
        if message.role is ChatRole.SYSTEM:
            for index, line in enumerate(wrap_text(message.content, max_width)):
                lines.append(RenderLine(
                    key=f"{message.id}:system:{index}",
                    text=sanitize_line(line),
                    dim=True,
                    italic=True,
                ))
            continue

        is_user = message.role is ChatRole.USER
        speaker = USER_LABEL if is_user else agent_name
        color = USER_COLOR if is_user else AGENT_COLOR
        lines.append(RenderLine(
            key=f"{message.id}:header",
            text=sanitize_line(f"{speaker}: {format_time(message.timestamp)}"),
            color=color,
            bold=True,
        ))

        body_width = max(1, max_width - len(BODY_INDENT))
        line_index = 0
        for segment in message.content.split("\n"):
            if is_rule_line(segment):
                lines.append(RenderLine(key=f"{message.id}:card:{line_index}", text=sanitize_line(segment)))
                line_index += 1
                continue
            for wrapped in wrap_text(segment, body_width):
                lines.append(RenderLine(
                    key=f"{message.id}:body:{line_index}",
                    text=sanitize_line(f"{BODY_INDENT}{wrapped}"),
                ))
                line_index += 1

    return lines


def card_inner_width(panel_width: int) -> int:
    """Text width inside a card drawn in a panel of the given width."""
    content_width = max(10, panel_width - 2)
    return max(MIN_CARD_WIDTH, content_width - 4)


def _wrap_card_line(text: str, max_width: int) -> list[str]:
    return [line for paragraph in text.split("\n") for line in wrap_text(paragraph, max_width)]


def build_card(title: str, lines: Iterable[str], max_inner_width: int) -> str:
    """Render a titled text card.

    The card is framed by '-' borders with an '=' divider under the title,
    each row padded to the card width.
    """
    title_lines = _wrap_card_line(title, max_inner_width)
    body_lines = [row for line in lines for row in _wrap_card_line(line, max_inner_width)]
    widest = max([MIN_CARD_WIDTH, *(len(line) for line in title_lines + body_lines)])
    width = min(max_inner_width, widest)

    border = CARD_BORDER_CHAR * width
    rows = [
        border,
        *(line.ljust(width) for line in title_lines),
        CARD_DIVIDER_CHAR * width,
        *(line.ljust(width) for line in body_lines),
        border,
    ]
    return "\n".join(rows)
