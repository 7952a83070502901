"""
Tests for the Couchbase content store against an in-process fake collection.
"""

import copy
from types import SimpleNamespace

import pytest
from couchbase.exceptions import CouchbaseException, DocumentExistsException, DocumentNotFoundException

from refdoc_importer.importer import Reconciler
from refdoc_importer.storage import RecordAttributes
from refdoc_importer.storage import couchbase_client
from refdoc_importer.storage.couchbase_client import CouchbaseContentStore

from conftest import entity, source_file


class FakeSD:
    """Stand-in for couchbase.subdocument producing plain (op, path, value) specs"""

    @staticmethod
    def upsert(path, value, create_parents=False):
        return ("upsert", path, value)


class FakeCollection:
    """Key-value behaviour of a Couchbase collection, enough for the store"""

    def __init__(self):
        self.docs = {}
        self.counters = {}
        self._cas = 0

    def _bump(self):
        self._cas += 1
        return self._cas

    def get(self, key):
        if key not in self.docs:
            raise DocumentNotFoundException()
        return SimpleNamespace(content_as={dict: copy.deepcopy(self.docs[key])}, cas=self._cas)

    def insert(self, key, doc):
        if key in self.docs:
            raise DocumentExistsException()
        self.docs[key] = copy.deepcopy(doc)
        return SimpleNamespace(cas=self._bump())

    def replace(self, key, doc, *options):
        if key not in self.docs:
            raise DocumentNotFoundException()
        self.docs[key] = copy.deepcopy(doc)
        return SimpleNamespace(cas=self._bump())

    def remove(self, key):
        if key not in self.docs:
            raise DocumentNotFoundException()
        del self.docs[key]

    def mutate_in(self, key, specs):
        if key not in self.docs:
            raise DocumentNotFoundException()
        for op, path, value in specs:
            target = self.docs[key]
            *parents, leaf = path.split(".")
            for part in parents:
                target = target.setdefault(part, {})
            target[leaf] = copy.deepcopy(value)

    def binary(self):
        return self

    def increment(self, key, *options):
        self.counters[key] = self.counters.get(key, 0) + 1
        return SimpleNamespace(content=self.counters[key])


@pytest.fixture
def collection(monkeypatch):
    monkeypatch.setattr(couchbase_client, "SD", FakeSD)
    return FakeCollection()


@pytest.fixture
def cb_store(collection, config):
    return CouchbaseContentStore(config, collection=collection)


def attrs(title="get_post", kind="wpapi-function", parent_id=0, **fields):
    return RecordAttributes(title=title, slug=title.lower(), kind=kind, parent_id=parent_id, **fields)


class TestRecords:

    def test_insert_then_find(self, cb_store, collection):
        result = cb_store.insert_record(attrs())

        assert result.ok
        assert cb_store.find_record("get_post", "wpapi-function", 0) == result.value
        doc = collection.docs[f"record::{result.value}"]
        assert doc["type"] == "doc_record"
        assert doc["title"] == "get_post"

    def test_duplicate_identity_rejected(self, cb_store):
        cb_store.insert_record(attrs())
        result = cb_store.insert_record(attrs())

        assert not result.ok
        assert result.error.kind == "duplicate"

    def test_find_missing(self, cb_store):
        assert cb_store.find_record("nope", "wpapi-function", 0) is None

    def test_update_keeps_meta(self, cb_store):
        record_id = cb_store.insert_record(attrs()).value
        cb_store.set_metadata(record_id, "_wpapi_line_num", 12)

        result = cb_store.update_record(record_id, attrs(summary="Changed"))

        assert result.value == record_id
        record = cb_store.get_record(record_id)
        assert record["summary"] == "Changed"
        assert record["meta"]["_wpapi_line_num"] == 12

    def test_update_moves_identity_claim(self, cb_store, collection):
        record_id = cb_store.insert_record(attrs()).value
        cb_store.update_record(record_id, attrs(parent_id=5))

        assert cb_store.find_record("get_post", "wpapi-function", 0) is None
        assert cb_store.find_record("get_post", "wpapi-function", 5) == record_id

    def test_update_missing_record(self, cb_store):
        result = cb_store.update_record(404, attrs())
        assert result.error.kind == "not_found"

    def test_attach_taxonomy_replaces(self, cb_store):
        record_id = cb_store.insert_record(attrs()).value
        cb_store.attach_taxonomy(record_id, 3, "wpapi-since")
        cb_store.attach_taxonomy(record_id, 4, "wpapi-since")

        assert cb_store.get_record(record_id)["terms"]["wpapi-since"] == [4]


class TestTerms:

    def test_create_and_lookup(self, cb_store):
        created = cb_store.create_term("wp-includes/post.php", "wpapi-source-file", "wp-includes_post-php")

        found = cb_store.find_term_by_slug("wp-includes_post-php", "wpapi-source-file")
        assert found == created.value

    def test_create_twice_fails(self, cb_store):
        cb_store.create_term("2.0", "wpapi-since")
        result = cb_store.create_term("2.0", "wpapi-since")

        assert result.error.kind == "term_exists"

    def test_term_exists_matches_exact_name(self, cb_store):
        cb_store.create_term("2.0", "wpapi-since")

        assert cb_store.term_exists("2.0", "wpapi-since").name == "2.0"
        assert cb_store.term_exists("2-0", "wpapi-since") is None
        assert cb_store.term_exists("2.0", "other") is None


class TestReconcileAgainstCouchbase:

    def test_reimport_is_idempotent(self, cb_store, collection, config):
        data = source_file(
            functions=[entity("get_post", tags=[{"name": "since", "content": "2.0"}])],
            classes=[entity("WP_Post", methods=[{"name": "filter"}], tags=[{"name": "since", "content": "2.0"}])],
        )
        reconciler = Reconciler(cb_store, config, sleep=lambda seconds: None)

        reconciler.import_file(data)
        records = {k for k in collection.docs if k.startswith("record::")}
        reconciler.import_file(data)

        assert {k for k in collection.docs if k.startswith("record::")} == records
        assert len(records) == 3
        assert reconciler.stats.updated == 3
        assert reconciler.errors == []
        since_terms = [k for k in collection.docs if k.startswith("term::wpapi-since::")]
        assert since_terms == ["term::wpapi-since::2-0"]


class FlakyCollection(FakeCollection):
    """First record insert fails and claims can never be removed"""

    def __init__(self):
        super().__init__()
        self.record_insert_failed = False

    def insert(self, key, doc):
        if key.startswith("record::") and not self.record_insert_failed:
            self.record_insert_failed = True
            raise CouchbaseException()
        return super().insert(key, doc)

    def remove(self, key):
        raise CouchbaseException()


class TestStaleIdentityClaim:

    def test_record_recreated_at_claimed_id(self, monkeypatch, config):
        monkeypatch.setattr(couchbase_client, "SD", FakeSD)
        collection = FlakyCollection()
        store = CouchbaseContentStore(config, collection=collection)
        reconciler = Reconciler(store, config, sleep=lambda seconds: None)
        data = source_file(functions=[entity("get_post")])

        reconciler.import_file(data)
        assert len(reconciler.errors) == 1
        assert "record::1" not in collection.docs

        for _ in range(3):
            reconciler.import_file(data)

        assert len(reconciler.errors) == 1
        assert collection.docs["record::1"]["title"] == "get_post"
        assert store.find_record("get_post", config.post_type_function, 0) == 1
        assert collection.docs["record::1"]["meta"]["_wpapi_line_num"] == 10

    def test_claim_for_other_record_not_restored(self, cb_store, collection):
        collection.insert("identity::wpapi-function::0::get_post", {"type": "doc_identity", "record_id": 7})

        result = cb_store.update_record(3, attrs())

        assert result.error.kind == "not_found"
        assert "record::3" not in collection.docs
