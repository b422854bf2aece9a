"""Terminal UI module for marketchat.

Provides a Textual-based TUI for chatting with the market agent.

Module structure (each module hides a design decision):
- config.py: Constants (log levels, layout thresholds, placeholders)
- layout.py: Which panels show and how wide they are
- formatting.py: Log lines, status text and input cleanup
- widgets.py: Line-windowed panels, prompt input, status bar
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette and theme configuration
- screens.py: Modal dialogs (fatal error screen)
- callbacks.py: Agent integration (how the TUI receives updates)
- log_handler.py: Logging records into the sidebar
- app.py: Application orchestration (user interaction flow)
"""

from .app import MarketChatApp, run_tui
from .callbacks import TUICallback
from .config import LogLevel
from .layout import FocusPanel, LayoutMode, LayoutState, SidebarView
from .log_handler import LogPanelHandler
from .widgets import ChatPanel, PromptInput, SidebarPanel, StatusBar

__all__ = [
    "ChatPanel",
    "FocusPanel",
    "LayoutMode",
    "LayoutState",
    "LogLevel",
    "LogPanelHandler",
    "MarketChatApp",
    "PromptInput",
    "SidebarPanel",
    "SidebarView",
    "StatusBar",
    "TUICallback",
    "run_tui",
]
