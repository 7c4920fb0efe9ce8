"""Pygame front-end: renderer and interactive play loop."""
