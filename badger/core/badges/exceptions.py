# badger/core/badges/exceptions.py

from __future__ import annotations


class BadgeError(Exception):
    """Base class for badge domain errors."""


class InvalidArgument(BadgeError, ValueError):
    """A caller passed a value the operation cannot accept."""


class GeneratorExhausted(BadgeError):
    """The phrase generator could not supply enough unique claim codes."""


__all__ = ["BadgeError", "InvalidArgument", "GeneratorExhausted"]
