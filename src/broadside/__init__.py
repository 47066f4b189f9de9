"""Broadside: a human-versus-computer naval combat game."""

__version__ = "0.1.0"
