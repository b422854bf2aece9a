"""Bottom-anchored scroll window over a growing list of lines.

Offsets count lines back from the bottom, so offset 0 follows new content.
"""

from dataclasses import dataclass

PAGE_SIZE = 10


@dataclass(frozen=True)
class ScrollWindow:
    """Visible slice [start, end) for a clamped offset."""

    offset: int
    start: int
    end: int
    max_scroll: int

    @property
    def at_bottom(self) -> bool:
        return self.offset == 0

    def slice(self, lines: list) -> list:
        return lines[self.start:self.end]


def max_scroll(total_lines: int, viewport_height: int) -> int:
    return max(0, max(0, total_lines) - max(0, viewport_height))


def scroll_window(total_lines: int, viewport_height: int, requested_offset: int) -> ScrollWindow:
    """Compute the visible slice for a viewport.

    Negative sizes and offsets are treated as zero; an offset past the top
    is clamped, so scrolling further is a no-op.

    Args:
        total_lines: Number of lines of content
        viewport_height: Rows available
        requested_offset: Lines back from the bottom

    Returns:
        ScrollWindow with the effective offset and slice bounds
    """
    total = max(0, total_lines)
    height = max(0, viewport_height)
    limit = max_scroll(total, height)
    offset = min(max(0, requested_offset), limit)
    start = max(0, total - height - offset)
    end = min(total, start + height)
    return ScrollWindow(offset=offset, start=start, end=end, max_scroll=limit)


class ScrollState:
    """Scroll offset for one panel.

    The maximum is supplied on each move because content keeps growing;
    the stored offset is re-clamped whenever it is read through window().
    """

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        self.offset = 0
        self.page_size = page_size

    def scroll_by(self, delta: int, limit: int) -> int:
        """Move toward older content for positive delta, newer for negative."""
        self.offset = min(max(0, self.offset + delta), max(0, limit))
        return self.offset

    def page_up(self, limit: int) -> int:
        return self.scroll_by(self.page_size, limit)

    def page_down(self, limit: int) -> int:
        return self.scroll_by(-self.page_size, limit)

    def stick_to_bottom(self) -> None:
        self.offset = 0

    def window(self, total_lines: int, viewport_height: int) -> ScrollWindow:
        result = scroll_window(total_lines, viewport_height, self.offset)
        self.offset = result.offset
        return result
