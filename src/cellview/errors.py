"""Exceptions raised by cellview."""

from __future__ import annotations


class CellviewError(Exception):
    """Base class for all cellview errors."""


class ScreenError(CellviewError):
    """The terminal device could not be initialised, read, or written."""
