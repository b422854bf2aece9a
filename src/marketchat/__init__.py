"""
MarketChat: a terminal chat console for a prediction-market trading agent.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .stream import ResponseStream, TerminalInput, build_render_lines, scroll_window, scrub, wrap_text

__all__ = [
    "ResponseStream",
    "TerminalInput",
    "build_render_lines",
    "scroll_window",
    "scrub",
    "wrap_text",
]
