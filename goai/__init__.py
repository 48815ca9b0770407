"""Heuristic Go (baduk) AI service with skill levels 1-10."""

__version__ = "1.0.0"
