"""
refdoc-importer

Reconciles parsed API documentation (source files, functions, classes and
methods) against a content store: one record per documented entity,
re-imports update in place, source-file and @since terms attached.
"""

from .config import ImporterConfig
from .models import DocBlock, DocTag, DocumentedEntity, SourceFile, load_source_files
from .importer import Reconciler, ImportSession, ImportStats
from .results import Result, StoreError

__all__ = [
    "ImporterConfig",
    "DocBlock",
    "DocTag",
    "DocumentedEntity",
    "SourceFile",
    "load_source_files",
    "Reconciler",
    "ImportSession",
    "ImportStats",
    "Result",
    "StoreError",
]

__version__ = "0.1.0"
