"""
Format-agnostic diagram model.

The visitor fills a ``Diagram`` with classes and relationships; renderers turn it
into text. Class IDs are sanitized once, when the class is stored.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..utils import sanitize_id


class ClassType(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ABSTRACT = "abstract"
    ENUM = "enum"


class Visibility(str, Enum):
    PUBLIC = "+"
    PROTECTED = "#"
    PRIVATE = "-"
    PACKAGE = "~"


class RelationType(str, Enum):
    INHERITANCE = "inheritance"
    COMPOSITION = "composition"
    AGGREGATION = "aggregation"
    ASSOCIATION = "association"
    DEPENDENCY = "dependency"
    REALIZATION = "realization"
    NEGATION = "negation"


@dataclass
class PropertyConstraints:
    """Validation constraints of a property."""

    format: str = ""
    pattern: str = ""
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False
    enum: list[str] = field(default_factory=list)


@dataclass
class DiagramProperty:
    """A property (field) of a class."""

    name: str
    type: str = ""
    visibility: Visibility = Visibility.PUBLIC
    required: bool = False
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    nullable: bool = False
    default: str = ""
    constraints: PropertyConstraints | None = None
    is_discriminator: bool = False
    discriminator_values: list[str] = field(default_factory=list)

    # Marker rows such as "... +3 more" or "(oneOf)" that do not stand for a real property
    synthetic: bool = False


@dataclass
class DiagramMethod:
    """A method (operation) of a class."""

    name: str
    parameters: str = ""
    return_type: str = ""
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    abstract: bool = False


@dataclass
class DiagramClass:
    """A class (node) of the diagram."""

    id: str
    name: str = ""
    type: ClassType = ClassType.CLASS
    annotations: list[str] = field(default_factory=list)
    properties: list[DiagramProperty] = field(default_factory=list)
    methods: list[DiagramMethod] = field(default_factory=list)
    namespace: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_property(self, prop: DiagramProperty | None) -> None:
        if prop is not None:
            self.properties.append(prop)

    def add_method(self, method: DiagramMethod | None) -> None:
        if method is not None:
            self.methods.append(method)

    def add_annotation(self, annotation: str) -> None:
        if annotation and annotation not in self.annotations:
            self.annotations.append(annotation)

    @property
    def real_properties(self) -> list[DiagramProperty]:
        """Properties without synthetic marker rows."""
        return [p for p in self.properties if not p.synthetic]


@dataclass
class DiagramRelationship:
    """A typed edge between two classes."""

    source_id: str
    target_id: str
    type: RelationType
    label: str = ""
    cardinality: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> tuple[str, str, RelationType, str, str]:
        """The tuple relationships are deduplicated on."""
        return (self.source_id, self.target_id, self.type, self.label, self.cardinality)


@dataclass
class DiagramMetadata:
    title: str = ""
    description: str = ""
    version: str = ""
    generated: str = ""
    source: str = ""


class Diagram:
    """
    Ordered collection of classes and relationships.

    Insertion order is output order. Mutations are serialized by a lock so several
    producers may share one diagram.
    """

    def __init__(self, metadata: DiagramMetadata | None = None):
        self.classes: list[DiagramClass] = []
        self.relationships: list[DiagramRelationship] = []
        self.metadata = metadata or DiagramMetadata()
        self._classes_by_id: dict[str, DiagramClass] = {}
        self._relationship_keys: set[tuple] = set()
        self._lock = threading.RLock()

    def add_class(self, cls: DiagramClass | None) -> DiagramClass | None:
        """
        Add a class unless one with the same ID exists.

        Args:
            cls: Class to add; its ID is sanitized in place

        Returns:
            The class stored under that ID (the first one added wins)
        """
        if cls is None:
            return None
        cls.id = sanitize_id(cls.id)
        if not cls.id:
            return None
        with self._lock:
            existing = self._classes_by_id.get(cls.id)
            if existing is not None:
                return existing
            self._classes_by_id[cls.id] = cls
            self.classes.append(cls)
            return cls

    def add_relationship(self, rel: DiagramRelationship | None) -> bool:
        """
        Add a relationship unless an identical one exists.

        Endpoints are sanitized the same way class IDs are.

        Returns:
            True if the relationship was added
        """
        if rel is None:
            return False
        rel.source_id = sanitize_id(rel.source_id)
        rel.target_id = sanitize_id(rel.target_id)
        with self._lock:
            if rel.identity in self._relationship_keys:
                return False
            self._relationship_keys.add(rel.identity)
            self.relationships.append(rel)
            return True

    def get_class(self, class_id: str) -> DiagramClass | None:
        with self._lock:
            return self._classes_by_id.get(sanitize_id(class_id))

    def has_class(self, class_id: str) -> bool:
        return self.get_class(class_id) is not None

    def replace_relationships(self, relationships: list[DiagramRelationship]) -> None:
        """Swap in a new relationship list, dropping duplicates."""
        with self._lock:
            self.relationships = []
            self._relationship_keys = set()
        for rel in relationships:
            self.add_relationship(rel)
