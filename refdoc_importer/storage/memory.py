"""
In-memory content store for tests and dry runs
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from ..results import Result
from ..slugs import sanitize_title
from .base import ContentStore, RecordAttributes, Term


class InMemoryContentStore(ContentStore):
    """Dict-backed ContentStore with sequential integer ids"""

    def __init__(self):
        self.records: Dict[int, Dict[str, Any]] = {}
        self.terms: Dict[Tuple[str, str], Term] = {}  # (taxonomy, slug) -> Term
        self._identity: Dict[Tuple[str, str, int], int] = {}
        self._next_record_id = 1
        self._next_term_id = 1

    # Terms

    def find_term_by_slug(self, slug: str, taxonomy: str) -> Optional[Term]:
        return self.terms.get((taxonomy, slug))

    def create_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Result[Term]:
        slug = slug or sanitize_title(name)
        if not slug:
            return Result.failure("invalid_term", f"A name is required for this term: {name!r}")
        if (taxonomy, slug) in self.terms:
            return Result.failure("term_exists", f"A term with the slug {slug!r} already exists in {taxonomy}")

        term = Term(term_id=self._next_term_id, name=name, slug=slug, taxonomy=taxonomy)
        self._next_term_id += 1
        self.terms[(taxonomy, slug)] = term
        return Result.success(term)

    def term_exists(self, value: str, taxonomy: str) -> Optional[Term]:
        for term in self.terms.values():
            if term.taxonomy == taxonomy and term.name == value:
                return term
        return None

    def terms_in(self, taxonomy: str) -> List[Term]:
        return [t for t in self.terms.values() if t.taxonomy == taxonomy]

    # Records

    def find_record(self, slug: str, kind: str, parent_id: int) -> Optional[int]:
        return self._identity.get((slug, kind, int(parent_id)))

    def insert_record(self, attrs: RecordAttributes) -> Result[int]:
        identity = (attrs.slug, attrs.kind, int(attrs.parent_id))
        if identity in self._identity:
            return Result.failure("duplicate", f"Record already exists for {identity}")

        record_id = self._next_record_id
        self._next_record_id += 1
        self.records[record_id] = {"id": record_id, **attrs.to_dict(), "meta": {}, "terms": {}}
        self._identity[identity] = record_id
        return Result.success(record_id)

    def update_record(self, record_id: int, attrs: RecordAttributes) -> Result[int]:
        record = self.records.get(record_id)
        if record is None:
            return Result.failure("not_found", f"Invalid record ID {record_id}")

        old_identity = (record["slug"], record["kind"], int(record["parent_id"]))
        new_identity = (attrs.slug, attrs.kind, int(attrs.parent_id))
        if new_identity != old_identity and new_identity in self._identity:
            return Result.failure("duplicate", f"Record already exists for {new_identity}")

        record.update(attrs.to_dict())
        self._identity.pop(old_identity, None)
        self._identity[new_identity] = record_id
        return Result.success(record_id)

    def set_metadata(self, record_id: int, key: str, value: Any) -> None:
        record = self.records.get(record_id)
        if record is None:
            logger.warning(f"Cannot set meta {key} on missing record {record_id}")
            return
        record["meta"][key] = copy.deepcopy(value)

    def attach_taxonomy(self, record_id: int, term_id: int, taxonomy: str) -> None:
        record = self.records.get(record_id)
        if record is None:
            logger.warning(f"Cannot set {taxonomy} terms on missing record {record_id}")
            return
        record["terms"][taxonomy] = [term_id]

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        return self.records.get(record_id)

    def records_with_term(self, taxonomy: str, term_id: int) -> List[Dict[str, Any]]:
        return [r for r in self.records.values() if term_id in r["terms"].get(taxonomy, [])]
