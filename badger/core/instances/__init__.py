# badger/core/instances/__init__.py
"""Earned badge instances."""

from .service import InstancesService  # noqa: F401

__all__: list[str] = ["InstancesService"]
