"""
Content store backends
"""

from .base import ContentStore, RecordAttributes, Term, STATUS_PUBLISH
from .memory import InMemoryContentStore

__all__ = [
    'ContentStore',
    'RecordAttributes',
    'Term',
    'STATUS_PUBLISH',
    'InMemoryContentStore',
]
