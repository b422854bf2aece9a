"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.

Layout: a one-row status bar over a body row holding the chat column
(messages above a one-row prompt) and the sidebar. Panel widths are set
from code because they depend on the terminal width.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Status Bar
   ============================================ */
#status-bar {
    height: 1;
    padding: 0 1;
    color: $accent;
    background: $background;
}

/* ============================================
   Body - Chat Column + Sidebar
   ============================================ */
#body {
    height: 1fr;
    layout: horizontal;
}

#chat-column {
    width: 1fr;
    height: 100%;
}

/* ============================================
   Chat Panel
   ============================================ */
#chat-panel {
    height: 1fr;
    padding: 0 1;
    background: $background;
}

/* ============================================
   Prompt - Marker + Input
   ============================================ */
#prompt-bar {
    height: 1;
    padding: 0 1;
}

#prompt-marker {
    width: 2;
    color: $primary;
}

#prompt-input {
    width: 1fr;
    height: 1;
    border: none;
    padding: 0;
    background: transparent;

    &:focus {
        border: none;
        background: transparent;
    }
}

#prompt-bar.-inactive #prompt-marker {
    color: $text-muted;
}

/* ============================================
   Sidebar
   ============================================ */
#sidebar {
    height: 100%;
    border-left: solid $border;
    padding: 0 0 0 1;
    background: $background;

    &:focus {
        border-left: solid $primary;
    }
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}
"""
