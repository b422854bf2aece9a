"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

THEME_NAME = "marketchat-night"

# Dark terminal palette with the orange status accent of the console
MARKETCHAT_NIGHT = Theme(
    name=THEME_NAME,
    primary="#5fafd7",      # Cyan-blue: user label, focused borders
    secondary="#87d787",    # Green: agent label
    accent="#ffa500",       # Orange: status bar
    foreground="#d0d0d0",
    background="#101014",
    success="#87d787",
    warning="#ffd75f",
    error="#ff5f5f",
    surface="#18181e",
    panel="#141418",
    dark=True,
    variables={
        "input-cursor-background": "#d0d0d0",
        "input-cursor-foreground": "#101014",
        "input-selection-background": "#5fafd7 30%",

        "border": "#3a3a44",
        "border-blurred": "#26262e",

        "scrollbar": "#26262e",
        "scrollbar-hover": "#3a3a44",
        "scrollbar-active": "#5fafd7",
        "scrollbar-background": "#141418",

        "text-muted": "#6c6c78",
        "text-disabled": "#3a3a44",
    },
)
