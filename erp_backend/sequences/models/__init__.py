# sequences/models/__init__.py

"""
SEQUENCES MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
"""

from sequences.models.shard import CounterShard

__all__ = [
    "CounterShard",
]
