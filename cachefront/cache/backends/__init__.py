"""
Cachefront - Cache Drivers

Exports the drivers with no third-party client dependency.

Database, Redis and DynamoDB drivers are imported lazily by factory.py
(or directly from their modules) so their client libraries stay optional.
"""

from .memory import MemoryDriver
from .null import NullDriver

__all__ = [
    "MemoryDriver",
    "NullDriver",
]
