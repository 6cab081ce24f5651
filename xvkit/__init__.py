"""Page tables, an image builder, a shell parser and utilities for a small teaching OS."""

__version__ = "0.1.0"