"""
Reconciler - import parsed source files into the content store.

For each file:
1. Find or create the file's grouping term (abort the file if that fails)
2. Import each top-level function
3. Import each class, which imports its methods
4. Pause every N items per loop to spare a rate-limited store
"""

import time
from typing import Callable, Iterable, List, Optional

from loguru import logger

from ..config import ImporterConfig
from ..models import SourceFile
from ..slugs import file_slug
from ..storage.base import ContentStore, Term
from .classes import ClassImporter
from .entity import EntityImporter
from .session import FileMeta, ImportSession, ImportStats


class Reconciler:
    """
    Top-level importer for parsed documentation trees.

    Usage:
        reconciler = Reconciler(store)
        reconciler.import_file(source_file, skip_sleep=True)
        for line in reconciler.errors: ...
    """

    def __init__(
        self,
        store: ContentStore,
        config: Optional[ImporterConfig] = None,
        session: Optional[ImportSession] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Args:
            store: Content store to reconcile against
            config: Kinds, taxonomies and throttle policy (defaults to ImporterConfig())
            session: Shared state; a fresh one is created if omitted
            sleep: Blocking pause used by the throttle
        """
        self.store = store
        self.config = config or ImporterConfig()
        self.session = session or ImportSession()
        self.sleep = sleep

        self.entities = EntityImporter(store, self.config, self.session)
        self.classes = ClassImporter(self.entities)

    @property
    def errors(self) -> List[str]:
        """Human-readable errors accumulated across every file of this run"""
        return self.session.errors

    @property
    def stats(self) -> ImportStats:
        return self.session.stats

    def import_files(self, files: Iterable[SourceFile], skip_sleep: bool = False,
                     import_internal: bool = False) -> ImportStats:
        """Import files in order and return the run's outcome counts"""
        files = list(files)
        total = len(files)
        logger.info(f"Starting import of {total} files...")

        for i, source_file in enumerate(files, start=1):
            logger.info(f"Processing file {i} of {total}: {source_file.path}")
            self.import_file(source_file, skip_sleep, import_internal)

        logger.info(f"✓ Import complete: {self.stats.to_dict()}")
        return self.stats

    def import_file(self, file: SourceFile, skip_sleep: bool = False, import_internal: bool = False) -> None:
        """
        Import one file's functions and classes

        Args:
            file: Parsed source file
            skip_sleep: If True, the throttle pauses are skipped
            import_internal: If True, entities marked @internal are imported
        """
        term = self._file_term(file)
        if term is None:
            return

        self.session.file_meta = FileMeta(docblock=file.file, term=term)
        self.session.stats.files += 1

        for i, function in enumerate(file.functions, start=1):
            self.entities.import_function(function, 0, import_internal)
            self._throttle(i, skip_sleep)

        for i, class_data in enumerate(file.classes, start=1):
            self.classes.import_class(class_data, import_internal)
            self._throttle(i, skip_sleep)

    def _file_term(self, file: SourceFile) -> Optional[Term]:
        """Find or create the grouping term for a file, None if creation failed"""
        taxonomy = self.config.taxonomy_file
        slug = file_slug(file.path)

        term = self.store.find_term_by_slug(slug, taxonomy)
        if term is not None:
            return term

        created = self.store.create_term(file.path, taxonomy, slug)
        if not created.ok:
            self.session.errors.append(
                f'Problem creating file tax item "{slug}" for {file.path}: {created.error_message}'
            )
            return None

        # Some stores return partial data from create; re-read the full term
        return self.store.find_term_by_slug(slug, taxonomy) or created.value

    def _throttle(self, count: int, skip_sleep: bool):
        if not skip_sleep and count % self.config.throttle_batch_size == 0:
            self.sleep(self.config.throttle_seconds)
