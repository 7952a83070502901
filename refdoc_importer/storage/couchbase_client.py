"""
Couchbase content store for documentation records and terms
Handles connection, identity claims, counters and sub-document writes

Key layout:
- record::{id}                          content record
- identity::{kind}::{parent}::{slug}    identity claim -> record id
- term::{taxonomy}::{slug}              classification term
- counter::record / counter::term       id sequences
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from loguru import logger
import couchbase.subdocument as SD
from couchbase.auth import PasswordAuthenticator
from couchbase.cluster import Cluster
from couchbase.exceptions import (
    BucketNotFoundException,
    CasMismatchException,
    CouchbaseException,
    DocumentExistsException,
    DocumentNotFoundException,
)
from couchbase.options import (
    ClusterOptions,
    DeltaValue,
    IncrementOptions,
    ReplaceOptions,
    SignedInt64,
)

from ..config import ImporterConfig
from ..results import Result
from ..slugs import sanitize_title
from .base import ContentStore, RecordAttributes, Term

RECORD_COUNTER = "counter::record"
TERM_COUNTER = "counter::term"


def record_key(record_id: int) -> str:
    return f"record::{record_id}"


def identity_key(slug: str, kind: str, parent_id: int) -> str:
    return f"identity::{kind}::{int(parent_id)}::{slug}"


def term_key(taxonomy: str, slug: str) -> str:
    return f"term::{taxonomy}::{slug}"


class CouchbaseContentStore(ContentStore):
    """
    ContentStore backed by a Couchbase bucket.

    Identity (slug, kind, parent) is enforced with a claim document that is
    written with insert() before the record itself, so two concurrent
    imports of the same entity cannot both create a record.
    """

    def __init__(self, config: Optional[ImporterConfig] = None, collection=None, cluster=None):
        """
        Connect to Couchbase, or wrap an already-open collection

        Args:
            config: Connection settings (defaults to ImporterConfig())
            collection: Existing collection to use instead of connecting
            cluster: Cluster owning the collection, closed by close()
        """
        self.config = config or ImporterConfig()
        self.cluster = cluster

        if collection is not None:
            self.collection = collection
            return

        logger.info(f"Connecting to Couchbase at {self.config.couchbase_host}")

        connection_string = f"couchbase://{self.config.couchbase_host}"
        auth = PasswordAuthenticator(self.config.couchbase_username, self.config.couchbase_password)

        try:
            self.cluster = Cluster(connection_string, ClusterOptions(auth))

            # Wait for cluster to be ready
            self.cluster.wait_until_ready(timedelta(seconds=self.config.couchbase_timeout_seconds))

            bucket = self.cluster.bucket(self.config.couchbase_bucket)
            self.collection = bucket.default_collection()

            logger.info(f"✓ Connected to Couchbase bucket: {self.config.couchbase_bucket}")

        except BucketNotFoundException:
            logger.error(f"Bucket '{self.config.couchbase_bucket}' not found. Please create it first.")
            raise
        except CouchbaseException as e:
            logger.error(f"Failed to connect to Couchbase: {e}")
            raise

    def _next_id(self, counter: str) -> int:
        result = self.collection.binary().increment(
            counter,
            IncrementOptions(initial=SignedInt64(1), delta=DeltaValue(1))
        )
        return int(result.content)

    def _get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return self.collection.get(key).content_as[dict]
        except DocumentNotFoundException:
            return None

    # Terms

    def find_term_by_slug(self, slug: str, taxonomy: str) -> Optional[Term]:
        try:
            doc = self._get(term_key(taxonomy, slug))
        except CouchbaseException as e:
            logger.error(f"Error looking up term {taxonomy}/{slug}: {e}")
            return None
        return _term_from_doc(doc) if doc else None

    def create_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Result[Term]:
        slug = slug or sanitize_title(name)
        if not slug:
            return Result.failure("invalid_term", f"A name is required for this term: {name!r}")

        try:
            term = Term(term_id=self._next_id(TERM_COUNTER), name=name, slug=slug, taxonomy=taxonomy)
            self.collection.insert(term_key(taxonomy, slug), {
                "type": "doc_term",
                "term_id": term.term_id,
                "name": term.name,
                "slug": term.slug,
                "taxonomy": term.taxonomy,
            })
            return Result.success(term)
        except DocumentExistsException:
            return Result.failure("term_exists", f"A term with the slug {slug!r} already exists in {taxonomy}")
        except CouchbaseException as e:
            logger.error(f"Error creating term {taxonomy}/{slug}: {e}")
            return Result.failure("store_error", str(e))

    def term_exists(self, value: str, taxonomy: str) -> Optional[Term]:
        term = self.find_term_by_slug(sanitize_title(value), taxonomy)
        if term and term.name == value:
            return term
        return None

    # Records

    def find_record(self, slug: str, kind: str, parent_id: int) -> Optional[int]:
        try:
            claim = self._get(identity_key(slug, kind, parent_id))
        except CouchbaseException as e:
            logger.error(f"Error looking up record {kind}/{slug}: {e}")
            return None
        return int(claim["record_id"]) if claim else None

    def insert_record(self, attrs: RecordAttributes) -> Result[int]:
        claim_key = identity_key(attrs.slug, attrs.kind, attrs.parent_id)
        try:
            record_id = self._next_id(RECORD_COUNTER)
            self.collection.insert(claim_key, {"type": "doc_identity", "record_id": record_id})
        except DocumentExistsException:
            return Result.failure("duplicate", f"Record already exists for {claim_key}")
        except CouchbaseException as e:
            logger.error(f"Error claiming {claim_key}: {e}")
            return Result.failure("store_error", str(e))

        try:
            self._insert_record_doc(record_id, attrs)
            return Result.success(record_id)
        except CouchbaseException as e:
            logger.error(f"Error inserting record {record_id}: {e}")
            self._release_claim(claim_key)
            return Result.failure("store_error", str(e))

    def update_record(self, record_id: int, attrs: RecordAttributes) -> Result[int]:
        key = record_key(record_id)
        try:
            current = self.collection.get(key)
        except DocumentNotFoundException:
            return self._restore_claimed_record(record_id, attrs)
        except CouchbaseException as e:
            logger.error(f"Error reading record {record_id}: {e}")
            return Result.failure("store_error", str(e))

        doc = current.content_as[dict]
        old_claim = identity_key(doc["slug"], doc["kind"], doc["parent_id"])
        new_claim = identity_key(attrs.slug, attrs.kind, attrs.parent_id)

        try:
            if new_claim != old_claim:
                self.collection.insert(new_claim, {"type": "doc_identity", "record_id": record_id})
            doc.update(attrs.to_dict())
            self.collection.replace(key, doc, ReplaceOptions(cas=current.cas))
        except DocumentExistsException:
            return Result.failure("duplicate", f"Record already exists for {new_claim}")
        except CasMismatchException:
            return Result.failure("conflict", f"Record {record_id} changed during update")
        except CouchbaseException as e:
            logger.error(f"Error updating record {record_id}: {e}")
            return Result.failure("store_error", str(e))

        if new_claim != old_claim:
            self._release_claim(old_claim)
        return Result.success(record_id)

    def set_metadata(self, record_id: int, key: str, value: Any) -> None:
        try:
            self.collection.mutate_in(record_key(record_id), [SD.upsert(f"meta.{key}", value, create_parents=True)])
        except CouchbaseException as e:
            logger.error(f"Error setting meta {key} on record {record_id}: {e}")

    def attach_taxonomy(self, record_id: int, term_id: int, taxonomy: str) -> None:
        try:
            self.collection.mutate_in(
                record_key(record_id),
                [SD.upsert(f"terms.{taxonomy}", [int(term_id)], create_parents=True)]
            )
        except CouchbaseException as e:
            logger.error(f"Error setting {taxonomy} terms on record {record_id}: {e}")

    def get_record(self, record_id: int) -> Optional[Dict[str, Any]]:
        try:
            return self._get(record_key(record_id))
        except CouchbaseException as e:
            logger.error(f"Error retrieving record {record_id}: {e}")
            return None

    def _insert_record_doc(self, record_id: int, attrs: RecordAttributes) -> None:
        self.collection.insert(record_key(record_id), {
            "type": "doc_record",
            "id": record_id,
            **attrs.to_dict(),
            "meta": {},
            "terms": {},
        })

    def _restore_claimed_record(self, record_id: int, attrs: RecordAttributes) -> Result[int]:
        """
        Recreate a record whose identity claim outlived it

        A failed insert can leave the claim behind when releasing it fails
        too; the claim still reserves the id, so the record is rebuilt there.
        """
        claim_key = identity_key(attrs.slug, attrs.kind, attrs.parent_id)
        try:
            claim = self._get(claim_key)
            if not claim or int(claim["record_id"]) != int(record_id):
                return Result.failure("not_found", f"Invalid record ID {record_id}")

            logger.warning(f"Record {record_id} missing for {claim_key}, recreating it")
            self._insert_record_doc(record_id, attrs)
            return Result.success(record_id)
        except CouchbaseException as e:
            logger.error(f"Error restoring record {record_id}: {e}")
            return Result.failure("store_error", str(e))

    def _release_claim(self, claim_key: str) -> None:
        try:
            self.collection.remove(claim_key)
        except CouchbaseException as e:
            logger.warning(f"Could not release identity claim {claim_key}: {e}")

    def close(self):
        """Close the Couchbase connection"""
        if self.cluster is not None:
            self.cluster.close()
            logger.info("Couchbase connection closed")


def _term_from_doc(doc: Dict[str, Any]) -> Term:
    return Term(
        term_id=int(doc["term_id"]),
        name=doc["name"],
        slug=doc["slug"],
        taxonomy=doc["taxonomy"],
    )
