"""Brick template manager: install bricks and their dependencies."""

__version__ = "0.3.0"
