# badger/__init__.py
"""
Badger: badge issuing service.

Claim-code lifecycle, redemption and category awards live under
``badger.core``; the HTTP layer under ``badger.api``.
"""
__version__ = "0.3.0"
