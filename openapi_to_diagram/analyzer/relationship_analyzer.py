"""
Relationship analysis: composition patterns and schema-level edges.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..diagram.model import RelationType
from ..document.nodes import Schema, SchemaProxy
from ..utils import extract_schema_name_from_reference
from .cache import Cache

DEFAULT_MAX_DEPTH = 50

_MIXIN_MARKERS = ("mixin", "trait")


class CompositionPattern(str, Enum):
    INHERITANCE = "inheritance"
    MULTIPLE_INHERITANCE = "multiple_inheritance"
    EXTENSION = "extension"
    MIXIN = "mixin"
    UNION = "union"
    NONE = "none"


# Patterns handled by flattening the allOf members into one class
ALL_OF_PATTERNS = (
    CompositionPattern.INHERITANCE,
    CompositionPattern.MULTIPLE_INHERITANCE,
    CompositionPattern.EXTENSION,
    CompositionPattern.MIXIN,
)


@dataclass
class Relationship:
    """An edge detected by the analyzer, before it is added to a diagram."""

    source_id: str
    target_id: str
    type: RelationType
    label: str = ""
    cardinality: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class CompositionAnalysis:
    pattern: CompositionPattern = CompositionPattern.NONE
    base_schemas: list[str] = field(default_factory=list)
    inline_properties: list[str] = field(default_factory=list)
    is_mixin: bool = False
    is_extension: bool = False


def extract_schema_name_from_proxy(proxy: SchemaProxy | None) -> str:
    """Reference tail, else title, else "Schema"."""
    if proxy is None:
        return ""
    if proxy.is_reference():
        return extract_schema_name_from_reference(proxy.get_reference())
    schema = proxy.schema
    if schema is not None and schema.title:
        return schema.title
    return "Schema"


def _has_mixin_naming(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _MIXIN_MARKERS)


class RelationshipAnalyzer:
    """Classifies schema composition and lists the edges a schema implies."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth <= 0:
            max_depth = DEFAULT_MAX_DEPTH
        self.max_depth = max_depth
        self.relationship_cache: Cache[str, list[Relationship]] = Cache(1000, 0.2)
        self.pattern_cache: Cache[str, CompositionPattern] = Cache(1000, 0.2)

    def analyze_schema(self, schema: Schema | None, get_id: Callable[[Any], str], depth: int = 0) -> list[Relationship]:
        """
        List the outgoing edges of a schema.

        allOf members become inheritance edges, oneOf/anyOf members associations,
        ``items`` and schema-valued ``additionalProperties`` compositions and ``not``
        a negation.

        Args:
            schema: Schema to analyze
            get_id: Function returning the class ID of a document node
            depth: Current nesting depth; beyond ``max_depth`` nothing is returned

        Returns:
            List of relationships (empty for None input)
        """
        if schema is None or depth > self.max_depth:
            return []

        schema_id = get_id(schema)
        cached = self.relationship_cache.get(schema_id)
        if cached is not None:
            return cached

        relationships = []
        for members, rel_type, label in (
            (schema.all_of, RelationType.INHERITANCE, "allOf"),
            (schema.one_of, RelationType.ASSOCIATION, "oneOf"),
            (schema.any_of, RelationType.ASSOCIATION, "anyOf"),
        ):
            for member in members:
                relationships.append(Relationship(schema_id, get_id(member), rel_type, label))

        if schema.items is not None:
            relationships.append(
                Relationship(schema_id, get_id(schema.items), RelationType.COMPOSITION, "items", "0..*")
            )

        if isinstance(schema.additional_properties, SchemaProxy):
            relationships.append(
                Relationship(
                    schema_id, get_id(schema.additional_properties), RelationType.COMPOSITION, "additionalProperties"
                )
            )

        if schema.not_ is not None:
            relationships.append(Relationship(schema_id, get_id(schema.not_), RelationType.NEGATION, "not"))

        self.relationship_cache.set(schema_id, relationships)
        return relationships

    def detect_composition_pattern(self, schema: Schema | None, get_id: Callable[[Any], str]) -> CompositionPattern:
        """
        Classify how a schema is composed.

        A mixin/trait-named allOf member makes a mixin. Otherwise one allOf member
        without own properties is plain inheritance, several are multiple
        inheritance, and anything that adds properties (at the top level or in an
        inline member) is an extension. oneOf/anyOf without allOf is a union.
        """
        if schema is None:
            return CompositionPattern.NONE

        schema_id = get_id(schema)
        cached = self.pattern_cache.get(schema_id)
        if cached is not None:
            return cached

        if schema.all_of:
            has_mixin_naming = False
            has_member_properties = False
            for member in schema.all_of:
                if _has_mixin_naming(extract_schema_name_from_proxy(member)):
                    has_mixin_naming = True
                if not member.is_reference() and member.schema is not None and member.schema.properties:
                    has_member_properties = True

            has_own_properties = bool(schema.properties) or has_member_properties
            if has_mixin_naming:
                pattern = CompositionPattern.MIXIN
            elif len(schema.all_of) == 1 and not has_own_properties:
                pattern = CompositionPattern.INHERITANCE
            elif len(schema.all_of) > 1 and not has_own_properties:
                pattern = CompositionPattern.MULTIPLE_INHERITANCE
            else:
                pattern = CompositionPattern.EXTENSION
        elif schema.one_of or schema.any_of:
            pattern = CompositionPattern.UNION
        else:
            pattern = CompositionPattern.NONE

        self.pattern_cache.set(schema_id, pattern)
        return pattern

    def analyze_composition(self, schema: Schema | None, get_id: Callable[[Any], str]) -> CompositionAnalysis | None:
        """Describe an allOf composition: its pattern, base schemas and inline properties."""
        if schema is None:
            return None

        analysis = CompositionAnalysis(pattern=self.detect_composition_pattern(schema, get_id))

        for member in schema.all_of:
            if member.is_reference():
                ref = member.get_reference()
                analysis.base_schemas.append(ref)
                if _has_mixin_naming(ref):
                    analysis.is_mixin = True
                continue

            member_schema = member.schema
            if member_schema is None:
                continue
            if member_schema.title:
                analysis.base_schemas.append(member_schema.title)
                if _has_mixin_naming(member_schema.title):
                    analysis.is_mixin = True
            if member_schema.properties:
                analysis.is_extension = True
                analysis.inline_properties.extend(member_schema.properties)

        if analysis.base_schemas and (schema.properties or analysis.inline_properties):
            analysis.is_extension = True

        return analysis

    def analyze_property(
        self, parent: SchemaProxy | None, property_schema: SchemaProxy | None, property_name: str
    ) -> Relationship | None:
        """Edge kind for a property: association for references, composition for inline schemas."""
        if parent is None or property_schema is None:
            return None
        rel_type = RelationType.ASSOCIATION if property_schema.is_reference() else RelationType.COMPOSITION
        return Relationship(source_id="", target_id="", type=rel_type, label=property_name)

    def clear_cache(self) -> None:
        self.relationship_cache.clear()
        self.pattern_cache.clear()
