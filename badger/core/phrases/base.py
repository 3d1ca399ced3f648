# badger/core/phrases/base.py
"""
Abstract base for claim-code phrase generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class BasePhraseGenerator(ABC):
    """Produces human-readable tokens for claim codes."""

    name: str

    @abstractmethod
    def generate(self, count: int) -> List[str]:
        """
        Return ``count`` pairwise distinct phrases.

        Phrases are lowercase, hyphen-joined and contain no spaces.

        Raises:
            GeneratorExhausted: if ``count`` distinct phrases cannot be produced.
        """
        ...


__all__ = ["BasePhraseGenerator"]
