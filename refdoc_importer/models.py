"""
Input models for the documentation parser's output.

A parsed tree is a list of SourceFile objects, each carrying its own
docblock plus the DocumentedEntity objects for the functions and classes
found in it. Classes nest their methods as further DocumentedEntity objects.
The importer only reads these models.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocTag(BaseModel):
    """A single doc-comment tag such as @since or @param"""
    model_config = ConfigDict(extra="allow")

    name: str
    content: str = ""


class DocBlock(BaseModel):
    """Parsed doc-comment: short description, long description and tags"""
    model_config = ConfigDict(extra="ignore")

    description: str = ""
    long_description: str = ""
    tags: List[DocTag] = Field(default_factory=list)

    def find_tags(self, name: str) -> List[DocTag]:
        """All tags with this name, in source order"""
        return [tag for tag in self.tags if tag.name == name]

    def first_tag(self, name: str) -> Optional[DocTag]:
        """First tag with this name, or None"""
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None

    def has_tag(self, name: str) -> bool:
        return self.first_tag(name) is not None

    def raw_tags(self) -> List[Dict[str, Any]]:
        """Tags as plain dicts, extra parser keys included"""
        return [tag.model_dump() for tag in self.tags]


class DocumentedEntity(BaseModel):
    """A documented function, method or class"""
    model_config = ConfigDict(extra="ignore")

    name: str
    line: int = 0
    arguments: List[Dict[str, Any]] = Field(default_factory=list)
    doc: DocBlock = Field(default_factory=DocBlock)
    visibility: Optional[str] = None
    final: bool = False
    abstract: bool = False
    static: bool = False
    methods: List["DocumentedEntity"] = Field(default_factory=list)

    @field_validator("final", "abstract", "static", mode="before")
    @classmethod
    def coerce_flag(cls, value):
        # Parsers emit "", "0", 0, None or missing for unset modifiers
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false")
        return bool(value)

    @field_validator("doc", mode="before")
    @classmethod
    def empty_doc(cls, value):
        return value or {}

    @field_validator("arguments", "methods", mode="before")
    @classmethod
    def empty_list(cls, value):
        return value or []

    def raw_arguments(self) -> List[Dict[str, Any]]:
        return [dict(arg) for arg in self.arguments]


DocumentedEntity.model_rebuild()


class SourceFile(BaseModel):
    """One parsed source file"""
    model_config = ConfigDict(extra="ignore")

    path: str
    file: DocBlock = Field(default_factory=DocBlock)
    functions: List[DocumentedEntity] = Field(default_factory=list)
    classes: List[DocumentedEntity] = Field(default_factory=list)

    @field_validator("file", mode="before")
    @classmethod
    def empty_docblock(cls, value):
        return value or {}

    @field_validator("functions", "classes", mode="before")
    @classmethod
    def empty_list(cls, value):
        return value or []


def load_source_files(data: Union[List[Dict[str, Any]], Dict[str, Any]]) -> List[SourceFile]:
    """
    Build SourceFile models from parser JSON output

    Args:
        data: Either a list of file dicts or a dict with a "files" key

    Returns:
        List of SourceFile in input order

    Raises:
        pydantic.ValidationError: if a file entry is malformed
        ValueError: if the top-level shape is not recognized
    """
    if isinstance(data, dict):
        if "files" not in data:
            raise ValueError("Expected a list of files or an object with a 'files' key")
        data = data["files"]
    if not isinstance(data, list):
        raise ValueError("Expected a list of files")
    return [SourceFile.model_validate(item) for item in data]
