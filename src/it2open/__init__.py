"""Run commands side by side in a grid of iTerm2 panes."""

__version__ = "0.1.0"
