"""View layer: text rendering, console listener and suggestion rotation."""
from .slider import SLIDE_INTERVAL, SuggestionSlider
from .text import ConsoleCartListener, render_cart, render_line, render_notice

__all__ = [
    "SLIDE_INTERVAL",
    "SuggestionSlider",
    "ConsoleCartListener",
    "render_cart",
    "render_line",
    "render_notice",
]
