"""typehere - keyboard-first notes with a command palette."""

__version__ = "0.1.0"
