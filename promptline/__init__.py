"""Segments, themes and a renderer for powerline-style shell prompts."""

__version__ = "0.1.0"
__all__ = ["__version__"]