"""
Importer for parsed documentation trees.

Reconciler -> ClassImporter -> EntityImporter, all sharing one ImportSession.
"""

from .session import (
    EntityRole, FileMeta, ImportSession, ImportStats, ItemResult,
    OUTCOME_IMPORTED, OUTCOME_UPDATED, OUTCOME_SKIPPED, OUTCOME_FAILED
)
from .entity import EntityImporter
from .classes import ClassImporter
from .reconciler import Reconciler

__all__ = [
    'Reconciler',
    'ClassImporter',
    'EntityImporter',
    'ImportSession',
    'ImportStats',
    'ItemResult',
    'FileMeta',
    'EntityRole',
    'OUTCOME_IMPORTED',
    'OUTCOME_UPDATED',
    'OUTCOME_SKIPPED',
    'OUTCOME_FAILED',
]
