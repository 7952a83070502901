"""
Class Importer - a class record, its class-only meta, then its methods.
"""

from ..models import DocumentedEntity
from .entity import EntityImporter
from .session import ItemResult


class ClassImporter:

    def __init__(self, entities: EntityImporter):
        self.entities = entities
        self.store = entities.store
        self.config = entities.config

    def import_class(self, data: DocumentedEntity, import_internal: bool = False) -> ItemResult:
        """
        Create or update the record for a class and each of its methods

        A failed class write stops here: no class meta is written and no
        methods are imported. A failed method only affects that method.
        """
        result = self.entities.import_item(data, 0, import_internal, {"kind": self.config.post_type_class})
        if not result:
            return result

        class_id = result.record_id
        meta_key = self.config.meta_key

        self.store.set_metadata(class_id, meta_key("final"), bool(data.final))
        self.store.set_metadata(class_id, meta_key("abstract"), bool(data.abstract))
        self.store.set_metadata(class_id, meta_key("static"), bool(data.static))
        self.store.set_metadata(class_id, meta_key("visibility"), data.visibility)

        for method in data.methods:
            self.entities.import_item(method, class_id, import_internal)

        return result
