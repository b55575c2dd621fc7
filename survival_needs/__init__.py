"""Survival needs simulation for tabletop RPG characters."""

__version__ = "0.3.0"
