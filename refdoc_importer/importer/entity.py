"""
Entity Importer - create or update the record for one function, method or class.
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from loguru import logger

from ..config import ImporterConfig
from ..models import DocumentedEntity
from ..slugs import sanitize_title
from ..storage.base import ContentStore, RecordAttributes, STATUS_PUBLISH
from .session import (
    EntityRole, ImportSession, ItemResult,
    OUTCOME_IMPORTED, OUTCOME_UPDATED, OUTCOME_SKIPPED, OUTCOME_FAILED
)


class EntityImporter:
    """
    Upserts documented entities into a ContentStore.

    Anything handled identically for functions, methods and classes lives
    here; class-only steps are in ClassImporter.
    """

    def __init__(self, store: ContentStore, config: ImporterConfig, session: ImportSession):
        self.store = store
        self.config = config
        self.session = session

    def role_for(self, kind: str, class_post_id: int) -> EntityRole:
        if kind == self.config.post_type_class:
            return EntityRole.CLASS
        if class_post_id:
            return EntityRole.METHOD
        return EntityRole.FUNCTION

    def import_function(self, data: DocumentedEntity, class_post_id: int = 0,
                        import_internal: bool = False) -> ItemResult:
        """Create or update the record for a function (or a method, given class_post_id)"""
        return self.import_item(data, class_post_id, import_internal)

    def import_item(
        self,
        data: DocumentedEntity,
        class_post_id: int = 0,
        import_internal: bool = False,
        overrides: Optional[Dict[str, Any]] = None
    ) -> ItemResult:
        """
        Create or update the record for an entity

        Args:
            data: Parsed entity
            class_post_id: Record id of the owning class, 0 if not a method
            import_internal: If True, entities tagged @internal are imported too
            overrides: RecordAttributes fields that replace the defaults (e.g. kind)

        Returns:
            ItemResult carrying the record id, or a falsy result if skipped/failed
        """
        overrides = overrides or {}
        kind = overrides.get("kind", self.config.post_type_function)
        role = self.role_for(kind, class_post_id)

        # Don't import items marked @internal unless explicitly requested
        if not import_internal and data.doc.has_tag("internal"):
            logger.info(f'{role.indent}Skipped importing @internal {role.value} "{data.name}"')
            self.session.stats.record(OUTCOME_SKIPPED)
            return ItemResult(OUTCOME_SKIPPED)

        attrs = replace(
            RecordAttributes(
                title=data.name,
                slug=sanitize_title(data.name),
                kind=self.config.post_type_function,
                parent_id=int(class_post_id),
                body=data.doc.long_description,
                summary=data.doc.description,
                status=STATUS_PUBLISH,
            ),
            **overrides
        )

        # Look for an existing record for this entity
        existing_id = self.store.find_record(sanitize_title(data.name), attrs.kind, int(class_post_id))
        is_new = existing_id is None

        if is_new:
            result = self.store.insert_record(attrs)
        else:
            result = self.store.update_record(existing_id, attrs)

        if not result.ok:
            self.session.errors.append(
                f'{role.indent}Problem inserting/updating post for {role.value} "{data.name}": {result.error_message}'
            )
            self.session.stats.record(OUTCOME_FAILED)
            return ItemResult(OUTCOME_FAILED)

        record_id = result.value

        # If the entity has @since markup, assign the version taxonomy
        since = data.doc.first_tag("since")
        if since is not None:
            self._assign_since_version(record_id, since.content)

        # Grouping term and meta, overwritten on every import
        if self.session.file_meta is not None:
            self.store.attach_taxonomy(record_id, self.session.file_meta.term.term_id, self.config.taxonomy_file)
        self.store.set_metadata(record_id, self.config.meta_key("args"), data.raw_arguments())
        self.store.set_metadata(record_id, self.config.meta_key("line_num"), data.line)
        self.store.set_metadata(record_id, self.config.meta_key("tags"), data.doc.raw_tags())

        verb = "Imported" if is_new else "Updated"
        logger.info(f'{role.indent}{verb} {role.value} "{data.name}"')

        outcome = OUTCOME_IMPORTED if is_new else OUTCOME_UPDATED
        self.session.stats.record(outcome)
        return ItemResult(outcome, record_id)

    def _assign_since_version(self, record_id: int, version: str):
        taxonomy = self.config.taxonomy_since_version
        term = self.store.term_exists(version, taxonomy)

        if term is None:
            created = self.store.create_term(version, taxonomy)
            if not created.ok:
                logger.warning(f"\tCannot set @since term: {created.error_message}")
                return
            term = created.value

        self.store.attach_taxonomy(record_id, term.term_id, taxonomy)
