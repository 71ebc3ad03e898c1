"""
Schema visiting: turns schemas into classes and edges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..analyzer.relationship_analyzer import ALL_OF_PATTERNS, Relationship
from ..diagram.model import DiagramClass, RelationType
from ..document.nodes import Schema, SchemaProxy
from ..log import get_logger
from .property_processor import SCALAR_TYPES

if TYPE_CHECKING:
    from .visitor import DiagramVisitor

logger = get_logger(__name__)


def is_simple_primitive(schema: Schema | None) -> bool:
    """
    True for bare inline scalars that stay property types instead of classes.

    Anything with a title, properties, composition, items, a schema for
    additionalProperties, an enum, constraints or a description is kept.
    """
    if schema is None:
        return True
    if schema.title or schema.properties:
        return False
    if schema.all_of or schema.one_of or schema.any_of:
        return False
    if isinstance(schema.additional_properties, SchemaProxy) or schema.items is not None:
        return False
    if schema.enum:
        return False
    if schema.first_type not in SCALAR_TYPES:
        return False
    return not (
        schema.format
        or schema.pattern
        or schema.min_length is not None
        or schema.max_length is not None
        or schema.minimum is not None
        or schema.maximum is not None
        or schema.description
    )


class SchemaVisitor:
    """Visits schema proxies and schemas on behalf of the diagram visitor."""

    def __init__(self, visitor: DiagramVisitor):
        self.visitor = visitor

    def visit_schema_proxy(self, proxy: SchemaProxy | None) -> None:
        """
        Visit the schema behind a slot.

        External references become placeholders, local references visit the
        canonical schema and inline schemas are visited in place. The proxy itself
        is never marked visited since it shares its schema's JSON path.
        """
        if proxy is None:
            return

        if proxy.is_reference():
            ref = proxy.get_reference()
            if self.visitor.external_handler.is_external(ref):
                self.add_external_placeholder(ref)
                return

        self.visit_schema(proxy.schema)

    def visit_schema(self, schema: Schema | None) -> None:
        """Visit a schema reached while walking the document.

        A schema already visited is skipped; if it is still being built, the
        revisit is recorded as a circular dependency.
        """
        v = self.visitor
        if schema is None or v.cancelled:
            return

        if v.composition.is_composition_member_of_parent(schema):
            logger.debug(f"Skipping composition member {schema.generate_json_path()}")
            return

        path = schema.generate_json_path()
        if not v.mark_visited(path):
            if v.is_in_progress(path):
                v.add_circular_reference(schema)
            return

        with v.descending(schema, path) as allowed:
            if allowed:
                self.visit_schema_internal(schema)

    def visit_component_schema_by_ref(self, ref: str) -> None:
        """Make sure the class of a referenced schema exists."""
        v = self.visitor
        if not ref:
            return
        if v.external_handler.is_external(ref):
            self.add_external_placeholder(ref)
            return
        if v.document is None:
            return

        schema = v.document.resolve_schema_reference(ref)
        if schema is None or v.diagram.has_class(v.get_class_id(schema)):
            return
        self.visit_schema(schema)

    def add_external_placeholder(self, ref: str) -> DiagramClass | None:
        placeholder = self.visitor.external_handler.create_external_placeholder(ref)
        if placeholder is None:
            return None
        if "file" in placeholder.metadata:
            placeholder.add_annotation(f"file:{placeholder.metadata['file']}")
        return self.visitor.add_class(placeholder)

    def visit_schema_internal(self, schema: Schema) -> None:
        """
        Build the class of a schema.

        Unions get a placeholder, allOf compositions are flattened, single-member
        unions hand over to their member, and everything else becomes a plain
        class whose properties and sub-schema edges are processed here.
        """
        v = self.visitor
        if is_simple_primitive(schema):
            return

        class_id = v.get_class_id(schema)
        name = v.identifier.extract_schema_name(schema)

        enum_info = v.enum_analyzer.analyze_enum(schema, name)
        if enum_info is not None and v.enum_analyzer.should_render_as_class(enum_info):
            v.add_class(v.enum_analyzer.create_enum_class(enum_info, class_id))
            return

        cls = None
        base_ids: list[str] = []

        if v.composition.uses_placeholder(schema):
            cls = v.composition.create_polymorphic_placeholder(schema, class_id, name)
            v.add_alias(class_id, cls.id)
        elif schema.all_of:
            pattern = v.relationship_analyzer.detect_composition_pattern(schema, v.get_class_id)
            if pattern in ALL_OF_PATTERNS:
                cls, base_ids = v.composition.flatten_all_of(schema, class_id, name)
        elif len(schema.one_of) == 1 or len(schema.any_of) == 1:
            member = schema.one_of[0] if len(schema.one_of) == 1 else schema.any_of[0]
            self.visit_schema_proxy(member)
            v.add_alias(class_id, v.get_class_id(member))
            return

        processed = cls is not None
        if cls is None:
            cls = DiagramClass(id=class_id, name=name)
        if schema.first_type:
            cls.add_annotation(schema.first_type)

        if not processed:
            v.properties.add_properties(cls, schema, parent_id=class_id, owner=schema)

        v.add_class(cls)

        if base_ids:
            for base_id in base_ids:
                v.add_relationship(base_id, class_id, RelationType.INHERITANCE, "extends")
        elif not processed:
            for rel in v.relationship_analyzer.analyze_schema(schema, v.get_class_id):
                self.visit_schema_proxy(self._relationship_target(schema, rel))
                v.add_relationship(rel.source_id, rel.target_id, rel.type, rel.label, rel.cardinality)

    def _relationship_target(self, schema: Schema, rel: Relationship) -> SchemaProxy | None:
        get_id = self.visitor.get_class_id
        if rel.label == "items":
            return schema.items
        if rel.label == "additionalProperties" and isinstance(schema.additional_properties, SchemaProxy):
            return schema.additional_properties
        if rel.label == "not":
            return schema.not_
        members = {"allOf": schema.all_of, "oneOf": schema.one_of, "anyOf": schema.any_of}.get(rel.label, [])
        for member in members:
            if get_id(member) == rel.target_id:
                return member
        return None
