"""Exceptions raised by the Broadside engine."""

from __future__ import annotations


class BroadsideError(Exception):
    """Base class for engine errors."""


class PlacementError(BroadsideError):
    """A fleet could not be laid out within the attempt budget."""
