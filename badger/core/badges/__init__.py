# badger/core/badges/__init__.py
"""
Badge catalogue, claim codes, awards and recommendations.

Services live in their own modules (``service``, ``claims``, ``awards``,
``recommendations``) and are imported from there.
"""
from .exceptions import BadgeError, GeneratorExhausted, InvalidArgument
from .roles import BadgeRole, Capstone, Contributor, Plain

__all__ = [
    "BadgeError", "GeneratorExhausted", "InvalidArgument",
    "BadgeRole", "Capstone", "Contributor", "Plain",
]
