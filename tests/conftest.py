"""
Shared fixtures for importer tests.
"""

from typing import Iterable, List

import pytest
from loguru import logger

from refdoc_importer.config import ImporterConfig
from refdoc_importer.importer import (
    ClassImporter, EntityImporter, FileMeta, ImportSession, Reconciler
)
from refdoc_importer.models import DocumentedEntity, SourceFile
from refdoc_importer.results import Result
from refdoc_importer.storage import InMemoryContentStore


class FailingStore(InMemoryContentStore):
    """In-memory store that rejects writes for chosen titles or taxonomies"""

    def __init__(self, fail_titles: Iterable[str] = (), fail_taxonomies: Iterable[str] = ()):
        super().__init__()
        self.fail_titles = set(fail_titles)
        self.fail_taxonomies = set(fail_taxonomies)
        self.create_term_calls = 0

    def insert_record(self, attrs):
        if attrs.title in self.fail_titles:
            return Result.failure("store_error", "Could not insert post into the database")
        return super().insert_record(attrs)

    def update_record(self, record_id, attrs):
        if attrs.title in self.fail_titles:
            return Result.failure("store_error", "Could not update post in the database")
        return super().update_record(record_id, attrs)

    def create_term(self, name, taxonomy, slug=None):
        self.create_term_calls += 1
        if taxonomy in self.fail_taxonomies:
            return Result.failure("store_error", "Could not insert term into the database")
        return super().create_term(name, taxonomy, slug)


def entity(name: str, tags=None, methods=None, **fields) -> DocumentedEntity:
    """Build a DocumentedEntity the way the parser would emit it"""
    data = {
        "name": name,
        "line": fields.pop("line", 10),
        "arguments": fields.pop("arguments", []),
        "doc": {
            "description": f"Summary of {name}.",
            "long_description": f"Longer description of {name}.",
            "tags": tags or [],
        },
        "methods": methods or [],
    }
    data.update(fields)
    return DocumentedEntity.model_validate(data)


def source_file(path: str = "wp-includes/post.php", functions=None, classes=None) -> SourceFile:
    return SourceFile.model_validate({
        "path": path,
        "file": {"description": f"File {path}", "tags": [{"name": "package", "content": "WordPress"}]},
        "functions": functions or [],
        "classes": classes or [],
    })


@pytest.fixture
def config() -> ImporterConfig:
    return ImporterConfig(_env_file=None)


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def reconciler(store, config, sleeps) -> Reconciler:
    return Reconciler(store, config, sleep=sleeps.append)


@pytest.fixture
def session(store, config) -> ImportSession:
    """Session with the grouping term already resolved, as during import_file"""
    term = store.create_term("wp-includes/post.php", config.taxonomy_file, "wp-includes_post-php").value
    return ImportSession(file_meta=FileMeta(docblock=source_file().file, term=term))


@pytest.fixture
def entities(store, config, session) -> EntityImporter:
    return EntityImporter(store, config, session)


@pytest.fixture
def classes(entities) -> ClassImporter:
    return ClassImporter(entities)


@pytest.fixture
def log_records():
    """Captured loguru records as (level, message) pairs"""
    records = []
    handler_id = logger.add(lambda msg: records.append((msg.record["level"].name, msg.record["message"])), level="DEBUG")
    yield records
    logger.remove(handler_id)
