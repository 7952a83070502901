"""
Per-run importer state shared by the reconciler and the entity/class importers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..models import DocBlock
from ..storage.base import Term

# Outcome values tallied in ImportStats
OUTCOME_IMPORTED = 'imported'   # New record inserted
OUTCOME_UPDATED = 'updated'     # Existing record updated
OUTCOME_SKIPPED = 'skipped'     # @internal and not requested
OUTCOME_FAILED = 'failed'       # Insert/update rejected by the store


class EntityRole(str, Enum):
    """What an entity is within its file, used for log and error wording"""
    CLASS = "class"
    METHOD = "method"
    FUNCTION = "function"

    @property
    def indent(self) -> str:
        return "\t\t" if self is EntityRole.METHOD else "\t"


@dataclass
class FileMeta:
    """The file currently being imported"""
    docblock: DocBlock
    term: Term


@dataclass
class ImportStats:
    """Entity outcome counts for a run"""
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    files: int = 0

    def record(self, outcome: str):
        setattr(self, outcome, getattr(self, outcome) + 1)

    def to_dict(self) -> Dict[str, int]:
        return {
            "files": self.files,
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


@dataclass
class ImportSession:
    """
    State for one invocation.

    file_meta is replaced for every file; errors accumulates across all
    files and is never cleared by the importer.
    """
    file_meta: Optional[FileMeta] = None
    errors: List[str] = field(default_factory=list)
    stats: ImportStats = field(default_factory=ImportStats)


@dataclass(frozen=True)
class ItemResult:
    """
    Outcome of importing one entity.

    Falsy when nothing was written (skipped or failed); check outcome to
    tell an expected @internal skip from a store failure.
    """
    outcome: str
    record_id: Optional[int] = None

    @property
    def is_new(self) -> bool:
        return self.outcome == OUTCOME_IMPORTED

    def __bool__(self) -> bool:
        return self.record_id is not None
