"""Fixed-width line wrapping.

One character is one column; grapheme width is not considered.
"""


def wrap_text(text: str, max_width: int) -> list[str]:
    """Wrap text to lines no wider than max_width.

    Each newline-separated paragraph wraps on its own. Words are split on
    single spaces and packed greedily; a word longer than the width is cut
    into width-sized fragments.

    Args:
        text: Text to wrap
        max_width: Maximum line length; non-positive widths disable wrapping

    Returns:
        Wrapped lines, never empty (``[""]`` for empty input)
    """
    if max_width <= 0:
        return [text]

    lines: list[str] = []
    for paragraph in text.split("\n"):
        if len(paragraph) <= max_width:
            lines.append(paragraph)
            continue

        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if len(candidate) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
            while len(word) > max_width:
                lines.append(word[:max_width])
                word = word[max_width:]
            current = word

        if current:
            lines.append(current)

    return lines or [""]


def truncate_text(text: str, max_width: int) -> str:
    """Clip text to max_width, marking the cut with '...' when there is room."""
    if max_width <= 0:
        return ""
    if len(text) <= max_width:
        return text
    if max_width <= 3:
        return text[:max_width]
    return text[:max_width - 3] + "..."


def clip(text: str, limit: int, marker: str = "…") -> str:
    """Clip text to limit characters, appending marker when clipped."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker
