# badger/core/badges/roles.py
"""
Category role of a badge.

A badge either caps a category (``Capstone``), counts toward categories it is
tagged with (``Contributor``), or takes no part in category awards
(``Plain``). The three persisted columns ``category_award``,
``category_requirement`` and ``category_weight`` are only ever read and
written through these types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Plain:
    pass


@dataclass(frozen=True)
class Contributor:
    weight: int


@dataclass(frozen=True)
class Capstone:
    category: str
    requirement: int


BadgeRole = Union[Plain, Contributor, Capstone]


def role_from_columns(
    category_award: Optional[str],
    category_requirement: Optional[int],
    category_weight: Optional[int],
) -> BadgeRole:
    if category_award:
        return Capstone(category=category_award, requirement=category_requirement or 0)
    if category_weight:
        return Contributor(weight=category_weight)
    return Plain()


def role_to_columns(role: BadgeRole) -> tuple[Optional[str], int, int]:
    """Return ``(category_award, category_requirement, category_weight)``."""
    if isinstance(role, Capstone):
        return role.category, role.requirement, 0
    if isinstance(role, Contributor):
        return None, 0, role.weight
    return None, 0, 0


__all__ = ["Plain", "Contributor", "Capstone", "BadgeRole", "role_from_columns", "role_to_columns"]
