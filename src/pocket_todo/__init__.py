"""pocket-todo: personal task tracker core."""

__version__ = "0.1.0"
