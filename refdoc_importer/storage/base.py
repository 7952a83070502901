"""
Content store interface used by the importer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..results import Result

STATUS_PUBLISH = "publish"


@dataclass(frozen=True)
class Term:
    """A classification term (source-file grouping, @since version, ...)"""
    term_id: int
    name: str
    slug: str
    taxonomy: str


@dataclass(frozen=True)
class RecordAttributes:
    """Attributes written to a content record on insert/update"""
    title: str
    slug: str
    kind: str
    parent_id: int = 0
    body: str = ""
    summary: str = ""
    status: str = STATUS_PUBLISH

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ContentStore(ABC):
    """
    Persistent store for content records and classification terms.

    Writes return a Result; implementations convert backend exceptions
    into failed Results instead of raising.
    """

    @abstractmethod
    def find_term_by_slug(self, slug: str, taxonomy: str) -> Optional[Term]:
        ...

    @abstractmethod
    def create_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Result[Term]:
        ...

    @abstractmethod
    def term_exists(self, value: str, taxonomy: str) -> Optional[Term]:
        """Term whose name equals value exactly, or None"""
        ...

    @abstractmethod
    def find_record(self, slug: str, kind: str, parent_id: int) -> Optional[int]:
        ...

    @abstractmethod
    def insert_record(self, attrs: RecordAttributes) -> Result[int]:
        ...

    @abstractmethod
    def update_record(self, record_id: int, attrs: RecordAttributes) -> Result[int]:
        ...

    @abstractmethod
    def set_metadata(self, record_id: int, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def attach_taxonomy(self, record_id: int, term_id: int, taxonomy: str) -> None:
        """Set the record's terms for this taxonomy to exactly [term_id]"""
        ...

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        ...

    def close(self) -> None:
        """Release backend resources"""
