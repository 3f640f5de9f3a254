"""Terminal progress output: line measurement, draw targets, multi-line displays and human-readable formatting."""

__version__ = "0.1.0"

__all__ = ["format", "lines", "term", "draw_target", "multi_state", "multi"]