# badger/workers/__init__.py
"""
Celery background tasks.
Nothing is imported eagerly: Celery loads badger.workers.tasks via ``-A``.
"""
__all__: list[str] = ["tasks"]
