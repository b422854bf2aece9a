"""Panel layout rules.

Hides which panels are visible, which one has focus and how wide each is
for a given terminal width. Plain state, no widgets, so the rules can be
checked without running the app.
"""

from dataclasses import dataclass
from enum import Enum

from .config import (
    MIN_CHAT_WIDTH,
    SIDEBAR_MAX_WIDTH,
    SIDEBAR_MIN_WIDTH,
    SIDEBAR_WIDTH_RATIO,
    WIDE_LAYOUT_MIN_COLUMNS,
)


class LayoutMode(str, Enum):
    CHAT = "chat"
    SPLIT = "split"
    SIDEBAR = "sidebar"


class FocusPanel(str, Enum):
    CHAT = "chat"
    SIDEBAR = "sidebar"


class SidebarView(str, Enum):
    """Sidebar pages, in the order Enter cycles through them."""

    SESSION = "session"
    ACTIONS = "actions"
    LOGS = "logs"

    @property
    def title(self) -> str:
        return {"session": "Session", "actions": "Agent Actions", "logs": "Agent Logs"}[self.value]

    def next(self) -> "SidebarView":
        order = list(SidebarView)
        return order[(order.index(self) + 1) % len(order)]


def is_wide(columns: int) -> bool:
    return columns >= WIDE_LAYOUT_MIN_COLUMNS


def sidebar_target_width(columns: int) -> int:
    return min(SIDEBAR_MAX_WIDTH, max(SIDEBAR_MIN_WIDTH, int(columns * SIDEBAR_WIDTH_RATIO)))


@dataclass(frozen=True)
class PanelGeometry:
    """Visibility and widths of the two panels."""

    show_chat: bool
    show_sidebar: bool
    chat_width: int
    sidebar_width: int
    gap: int


class LayoutState:
    """Layout mode and focused panel.

    On narrow terminals a split layout collapses to whichever panel has
    focus.
    """

    def __init__(self, mode: LayoutMode = LayoutMode.SPLIT, focus: FocusPanel = FocusPanel.CHAT) -> None:
        self.mode = mode
        self.focus = focus

    def toggle_focus(self, columns: int) -> None:
        """Tab: move focus to the other panel, opening it if hidden."""
        wide = is_wide(columns)
        if self.mode is LayoutMode.SPLIT:
            self.focus = FocusPanel.SIDEBAR if self.focus is FocusPanel.CHAT else FocusPanel.CHAT
        elif self.mode is LayoutMode.CHAT:
            self.mode = LayoutMode.SPLIT if wide else LayoutMode.SIDEBAR
            self.focus = FocusPanel.SIDEBAR
        else:
            self.mode = LayoutMode.SPLIT if wide else LayoutMode.CHAT
            self.focus = FocusPanel.CHAT
        self.normalize(columns)

    def toggle_sidebar(self, columns: int) -> None:
        """Shift+Tab: hide the sidebar, or bring it back beside the chat."""
        if self.mode is LayoutMode.SPLIT:
            self.mode = LayoutMode.CHAT
        else:
            self.mode = LayoutMode.SPLIT if is_wide(columns) else LayoutMode.CHAT
        self.focus = FocusPanel.CHAT
        self.normalize(columns)

    def show_sidebar(self, columns: int) -> None:
        """Open the sidebar for a slash command.

        Beside the chat when there is room; otherwise the sidebar replaces
        the chat and takes focus.
        """
        if is_wide(columns):
            self.mode = LayoutMode.SPLIT
        else:
            self.mode = LayoutMode.SIDEBAR
        self.normalize(columns)

    def normalize(self, columns: int) -> None:
        if self.mode is LayoutMode.CHAT:
            self.focus = FocusPanel.CHAT
        elif self.mode is LayoutMode.SIDEBAR:
            self.focus = FocusPanel.SIDEBAR
        elif not is_wide(columns):
            self.mode = LayoutMode.SIDEBAR if self.focus is FocusPanel.SIDEBAR else LayoutMode.CHAT

    def geometry(self, columns: int) -> PanelGeometry:
        wide = is_wide(columns)
        show_chat = self.mode in (LayoutMode.CHAT, LayoutMode.SPLIT)
        show_sidebar = self.mode in (LayoutMode.SIDEBAR, LayoutMode.SPLIT)

        if show_sidebar:
            sidebar_width = sidebar_target_width(columns) if show_chat and wide else columns
        else:
            sidebar_width = 0
        gap = 1 if show_chat and show_sidebar and wide else 0
        chat_width = max(MIN_CHAT_WIDTH, columns - sidebar_width - gap) if show_chat else 0

        if not wide:
            show_chat = self.mode is not LayoutMode.SIDEBAR
            show_sidebar = self.mode is LayoutMode.SIDEBAR
            chat_width = columns if show_chat else 0
            sidebar_width = columns if show_sidebar else 0
            gap = 0
        return PanelGeometry(show_chat, show_sidebar, chat_width, sidebar_width, gap)
