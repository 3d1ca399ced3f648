# badger/core/phrases/words.py

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from badger.core.badges.exceptions import GeneratorExhausted
from .base import BasePhraseGenerator
from .wordlists import ADJECTIVES, ADVERBS, NOUNS

log = logging.getLogger(__name__)


class WordListPhraseGenerator(BasePhraseGenerator):
    """
    Builds phrases like ``remarkably-fuzzy-otter`` by picking one word from
    each list at random.
    """

    name: str = "words"

    def __init__(
        self,
        *wordlists: Sequence[str],
        rng: Optional[random.Random] = None,
    ) -> None:
        self.wordlists: tuple[Sequence[str], ...] = wordlists or (ADVERBS, ADJECTIVES, NOUNS)
        self._rng = rng or random.SystemRandom()

    @property
    def capacity(self) -> int:
        """Number of distinct phrases this generator can produce."""
        total = 1
        for words in self.wordlists:
            total *= len(words)
        return total

    def random_phrase(self) -> str:
        return "-".join(self._rng.choice(words) for words in self.wordlists).lower()

    def generate(self, count: int) -> List[str]:
        if count > self.capacity:
            raise GeneratorExhausted(
                f"cannot produce {count} distinct phrases, only {self.capacity} exist"
            )
        seen: set[str] = set()
        results: List[str] = []
        while len(results) < count:
            phrase = self.random_phrase()
            if phrase not in seen:
                seen.add(phrase)
                results.append(phrase)
        log.debug("WordListPhraseGenerator: generated %d phrases", len(results))
        return results


__all__ = ["WordListPhraseGenerator"]
