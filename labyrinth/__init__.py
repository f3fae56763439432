"""Labyrinth engine: maze generation, pathfinding and game sessions."""

__version__ = "1.0.0"
