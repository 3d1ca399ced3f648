# badger/core/phrases/__init__.py
"""
Claim-code phrase generators.

• ``BasePhraseGenerator`` – abstract interface (see base.py).
• ``get_phrase_generator()`` – factory returning the generator named by
  ``name`` or ``settings.PHRASE_GENERATOR``.
"""
from __future__ import annotations

import importlib
import logging
from typing import Callable, Dict, Type

from badger.config import settings
from .base import BasePhraseGenerator

log = logging.getLogger(__name__)


def _lazy_import(module_suffix: str, class_name: str) -> Type[BasePhraseGenerator]:
    module_name = f"{__name__}{module_suffix}"
    try:
        module = importlib.import_module(module_name)
        generator_class = getattr(module, class_name)
    except (ModuleNotFoundError, AttributeError) as e:
        log.error("Failed to lazy-import phrase generator '%s.%s': %s", module_name, class_name, e)
        raise ImportError(f"Could not import phrase generator {class_name} from {module_name}") from e
    if not issubclass(generator_class, BasePhraseGenerator):
        raise TypeError(f"Class {class_name} is not a subclass of BasePhraseGenerator")  # pragma: no cover
    return generator_class


_GENERATOR_LOADERS: Dict[str, Callable[[], Type[BasePhraseGenerator]]] = {
    "words": lambda: _lazy_import(".words", "WordListPhraseGenerator"),
}


def get_phrase_generator(name: str | None = None) -> BasePhraseGenerator:
    """Return a phrase generator instance (``name`` is case-insensitive)."""
    key = (name or settings.PHRASE_GENERATOR).lower()
    loader = _GENERATOR_LOADERS.get(key)
    if loader is None:
        raise ValueError(f"Unknown phrase generator: {key}")
    return loader()()


__all__: list[str] = ["BasePhraseGenerator", "get_phrase_generator"]
