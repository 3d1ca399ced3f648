# badger/core/notifications/__init__.py
"""
Award notifiers.

• ``BaseNotifier`` – abstract interface (see base.py).
• ``get_notifier()`` – factory returning the notifier named by ``name`` or
  ``settings.NOTIFIER``.

Providers are imported lazily so the Celery client is only loaded when the
e-mail notifier is actually selected.
"""
from __future__ import annotations

import importlib
import logging
from typing import Callable, Dict, Type

from badger.config import settings
from .base import BaseNotifier

log = logging.getLogger(__name__)


def _lazy_import(module_suffix: str, class_name: str) -> Type[BaseNotifier]:
    module = importlib.import_module(f"{__name__}{module_suffix}")
    return getattr(module, class_name)


_NOTIFIER_LOADERS: Dict[str, Callable[[], Type[BaseNotifier]]] = {
    "log": lambda: _lazy_import(".logger", "LogNotifier"),
    "email": lambda: _lazy_import(".email", "EmailNotifier"),
}


def get_notifier(name: str | None = None) -> BaseNotifier:
    """Return a notifier instance (``name`` is case-insensitive)."""
    key = (name or settings.NOTIFIER).lower()
    try:
        loader = _NOTIFIER_LOADERS[key]
    except KeyError as exc:
        raise ValueError(f"Unknown notifier: {key}") from exc
    notifier = loader()()
    log.debug("Using notifier: %s", notifier.name)
    return notifier


__all__: list[str] = ["BaseNotifier", "get_notifier"]
